import io

import pytest
from docx import Document
from sqlalchemy.orm import sessionmaker

from app.infra.db import build_engine, create_tables

CONTRACT_LINES = [
    "CỘNG HÒA XÃ HỘI CHỦ NGHĨA VIỆT NAM",
    "HỢP ĐỒNG DỊCH VỤ BẢO VỆ",
    "Số: 015/2025/HĐDV-BV/HCM/ABC",
    "Hôm nay, ngày 25 tháng 05 năm 2025, tại TP. Hồ Chí Minh, chúng tôi gồm:",
    "BÊN A (Bên cung cấp dịch vụ): CÔNG TY TNHH DỊCH VỤ AN TOÀN",
    "Địa chỉ: 12 Lê Lợi, Quận 1, TP. Hồ Chí Minh",
    "Điện thoại: 028 3822 1111",
    "Email: info@antoan.vn",
    "BÊN B (Bên thuê dịch vụ): CÔNG TY TNHH THƯƠNG MẠI ABC",
    "Địa chỉ: 123 Nguyễn Văn Linh, Phường Tân Phong, Quận 7, TP. Hồ Chí Minh",
    "Điện thoại: 0901 234 567",
    "Email: lienhe@abc.com.vn",
    "Mã số thuế: 0312345678",
    "Đại diện: Ông Nguyễn Văn An - Giám đốc",
    "ĐIỀU 1: NỘI DUNG DỊCH VỤ",
    "Tên địa điểm: Nhà máy ABC Quận 7",
    "Địa chỉ: 456 Nguyễn Thị Thập, Phường Tân Phú, Quận 7, TP. Hồ Chí Minh",
    "Số lượng: 02 (hai) nhân viên bảo vệ, trực 24/7.",
    "ĐIỀU 2: THỜI HẠN HỢP ĐỒNG",
    "Thời hạn: 12 tháng, từ ngày 01/06/2025 đến ngày 31/05/2026.",
    "ĐIỀU 3: THỜI GIAN LÀM VIỆC",
    "3.1. Ca làm việc:",
    "- Ca sáng: từ 06h00 đến 14h00",
    "3.3. Ngày cuối tuần: Thứ 7 và Chủ nhật duy trì bảo vệ như ngày làm việc bình thường.",
    "3.4. Ngày lễ, Tết:",
    "- Tết Nguyên Đán 2026: từ 16/02/2026 đến hết 20/02/2026",
    "- Giỗ Tổ Hùng Vương: 26/04/2026",
    "- Ngày Giải phóng miền Nam: 30/04/2026",
    "- Ngày Quốc tế Lao động: 01/05/2026",
    "- Ngày Quốc khánh: 02/09/2025",
    "- Nhân viên được nghỉ bù vào 27/04/2026",
    "ĐIỀU 4: ĐIỀU KHOẢN CHUNG",
    "Hai bên cam kết thực hiện đúng hợp đồng.",
]


@pytest.fixture
def contract_text() -> str:
    return "\n".join(CONTRACT_LINES)


def make_docx(lines) -> bytes:
    doc = Document()
    for line in lines:
        doc.add_paragraph(line)
    buf = io.BytesIO()
    doc.save(buf)
    return buf.getvalue()


@pytest.fixture
def contract_docx() -> bytes:
    return make_docx(CONTRACT_LINES)


@pytest.fixture
def engine(tmp_path):
    # file-backed so concurrent sessions get their own connections
    engine = build_engine(f"sqlite:///{tmp_path / 'contracts.db'}")
    create_tables(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, expire_on_commit=False)
