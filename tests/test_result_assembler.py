from app.core.errors import CustomerNotFound, UnsupportedFileType
from app.services.ingestion.result_assembler import failure_result, success_result


def test_success_result_counts_ids():
    result = success_result(
        contract_id="c-1",
        customer_id="cu-1",
        location_ids=["l-1"],
        shift_schedule_ids=["s-1", "s-2"],
        contract_number="015/2025/HĐDV-BV",
        customer_name="CÔNG TY ABC",
        raw_text="text",
        warnings=["w"],
        confidence_score=85,
    )

    assert result.success
    assert result.locations_created == 1
    assert result.schedules_created == 2
    assert result.error_message is None


def test_failure_result_from_typed_error():
    result = failure_result(UnsupportedFileType("bad type"), warnings=["w"])

    assert not result.success
    assert result.error_code == "UNSUPPORTED_FILE_TYPE"
    assert result.error_message == "bad type"
    assert result.warnings == ["w"]
    assert result.contract_id is None


def test_failure_result_echoes_identity_for_unknown_customer():
    identity = {"company_name": "CÔNG TY ABC", "email": "a@abc.vn"}
    result = failure_result(CustomerNotFound("not found", identity=identity))

    assert result.error_code == "CUSTOMER_NOT_FOUND"
    assert result.extracted_identity == identity


def test_failure_result_from_unexpected_error():
    result = failure_result(RuntimeError("boom"), raw_text="abc")

    assert result.error_code == "IMPORT_FAILED"
    assert result.error_message == "Lỗi import contract: boom"
    assert result.raw_text == "abc"
