import itertools
from datetime import date

from app.services.ingestion.confidence_scorer import WEIGHTS, confidence_score

PRESENT = {
    "contract_number": "015/2025/HĐDV-BV",
    "customer_name": "CÔNG TY ABC",
    "start_date": date(2025, 6, 1),
    "end_date": date(2026, 5, 31),
    "guards_required": 2,
    "schedules_created": 1,
}
ABSENT = {
    "contract_number": None,
    "customer_name": None,
    "start_date": None,
    "end_date": None,
    "guards_required": 0,
    "schedules_created": 0,
}


def _score(present_keys):
    kwargs = {k: (PRESENT[k] if k in present_keys else ABSENT[k]) for k in PRESENT}
    return confidence_score(**kwargs)


def test_all_present_is_100_and_none_present_is_0():
    assert _score(PRESENT.keys()) == 100
    assert _score(()) == 0
    assert sum(WEIGHTS.values()) == 100


def test_score_is_monotonic_and_bounded():
    keys = list(PRESENT)
    for size in range(len(keys) + 1):
        for subset in itertools.combinations(keys, size):
            base = _score(subset)
            assert 0 <= base <= 100
            for extra in keys:
                if extra not in subset:
                    assert _score(subset + (extra,)) >= base


def test_negative_guard_count_scores_nothing():
    kwargs = dict(ABSENT, guards_required=-3)

    assert confidence_score(**kwargs) == 0
