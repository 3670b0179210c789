"""Unit tests for the entry store implementations."""

import json
import threading
from datetime import date
from decimal import Decimal

import pytest

from fieldpay.sdk.entries import LOCK_STRIPES, InMemoryEntryRepository, JsonEntryRepository
from fieldpay.sdk.inputs import InvalidInputError
from fieldpay.sdk.schemas import DailyWorkData


@pytest.fixture(params=["memory", "json"])
def repo(request, tmp_path):
    """Each test runs against both store implementations."""
    if request.param == "memory":
        return InMemoryEntryRepository()
    return JsonEntryRepository(tmp_path / "data")


@pytest.fixture
def work():
    return DailyWorkData.model_validate({
        "dayRate": "450", "dayRateUsed": True, "travelKms": "45", "subsistence": "75",
    })


class TestEntryRepository:

    def test_missing_entry_is_none(self, repo):
        assert repo.get("trial-1", date(2024, 1, 1)) is None

    def test_upsert_then_get(self, repo, work):
        repo.upsert("trial-1", date(2024, 1, 1), work)

        assert repo.get("trial-1", date(2024, 1, 1)) == work

    def test_upsert_replaces(self, repo, work):
        day = date(2024, 1, 1)
        repo.upsert("trial-1", day, work)
        corrected = work.model_copy(update={"subsistence": Decimal("50")})

        repo.upsert("trial-1", day, corrected)

        assert repo.get("trial-1", day).subsistence == Decimal("50")

    def test_trials_are_separate(self, repo, work):
        repo.upsert("trial-1", date(2024, 1, 1), work)

        assert repo.get("trial-2", date(2024, 1, 1)) is None

    @pytest.mark.parametrize("trial_id", ["", "../escape", "a/b", "trial 1", None])
    def test_invalid_trial_id(self, repo, work, trial_id):
        with pytest.raises(InvalidInputError):
            repo.upsert(trial_id, date(2024, 1, 1), work)


class TestJsonEntryRepository:

    def test_file_layout(self, tmp_path, work):
        repo = JsonEntryRepository(tmp_path)

        repo.upsert("trial_7", date(2024, 2, 3), work)

        path = tmp_path / "entries" / "trial_7" / "2024-02-03.json"
        record = json.loads(path.read_text())
        assert record["meta"]["trial_id"] == "trial_7"
        assert record["meta"]["entry_date"] == "2024-02-03"
        assert "saved_at" in record["meta"]
        assert Decimal(record["data"]["day_rate"]) == Decimal("450")

    def test_no_temp_files_left(self, tmp_path, work):
        repo = JsonEntryRepository(tmp_path)

        repo.upsert("trial-1", date(2024, 1, 1), work)
        repo.upsert("trial-1", date(2024, 1, 1), work)

        assert [p.name for p in (tmp_path / "entries" / "trial-1").iterdir()] == ["2024-01-01.json"]

    def test_survives_new_instance(self, tmp_path, work):
        JsonEntryRepository(tmp_path).upsert("trial-1", date(2024, 1, 1), work)

        assert JsonEntryRepository(tmp_path).get("trial-1", date(2024, 1, 1)) == work

    def test_defaults_to_configured_data_dir(self, tmp_path, monkeypatch):
        config_dir = tmp_path / "config"
        config_dir.mkdir()
        data_dir = tmp_path / "data"
        monkeypatch.setenv("FIELD_PAY_CONFIG_PATH", str(config_dir))
        (config_dir / "settings.json").write_text(json.dumps({"data_dir": str(data_dir)}))

        assert JsonEntryRepository().data_dir == data_dir

    def test_lock_pool_does_not_grow(self, tmp_path, work):
        repo = JsonEntryRepository(tmp_path)

        for offset in range(200):
            repo.upsert("trial-1", date.fromordinal(date(2024, 1, 1).toordinal() + offset), work)

        assert len(repo._locks) == LOCK_STRIPES
        assert repo._lock_for("trial-1", date(2024, 1, 1)) is repo._lock_for("trial-1", date(2024, 1, 1))

    def test_concurrent_writes_to_one_day(self, tmp_path, work):
        repo = JsonEntryRepository(tmp_path)
        day = date(2024, 1, 1)
        versions = [work.model_copy(update={"subsistence": Decimal(n)}) for n in range(20)]

        threads = [threading.Thread(target=repo.upsert, args=("trial-1", day, v)) for v in versions]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert repo.get("trial-1", day) in versions
        assert [p.name for p in (tmp_path / "entries" / "trial-1").iterdir()] == ["2024-01-01.json"]
