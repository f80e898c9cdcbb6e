"""
Tests for reading the export from disk.
"""
from src.data.loader import read_raw_csv, load_record_store, get_data_status

CSV_TEXT = (
    "날짜,시간,센터명,전체,마감률(%),마감,잔여\n"
    "2025-01-01,10:00,A센터,100,50,50,50\n"
    "2025-01-01,11:00,A센터,100,60,60,40\n"
)


class TestReadRawCsv:
    """Tests for raw file reading."""

    def test_missing_file_returns_empty_text(self, tmp_path):
        assert read_raw_csv(tmp_path / "missing.csv") == ""

    def test_bom_is_stripped(self, tmp_path):
        path = tmp_path / "export.csv"
        path.write_bytes(CSV_TEXT.encode("utf-8-sig"))

        text = read_raw_csv(path)

        assert text.startswith("날짜")
        assert text == CSV_TEXT


class TestLoadRecordStore:
    """Tests for the cached store loader."""

    def test_loads_snapshots(self, tmp_path):
        path = tmp_path / "export.csv"
        path.write_text(CSV_TEXT, encoding="utf-8")
        load_record_store.clear()

        store = load_record_store(str(path))

        assert len(store) == 2
        assert store.center_names() == ["A센터"]

    def test_missing_file_gives_empty_store(self, tmp_path):
        load_record_store.clear()
        assert load_record_store(str(tmp_path / "missing.csv")).is_empty


class TestDataStatus:
    """Tests for export status reporting."""

    def test_existing_file(self, tmp_path):
        path = tmp_path / "export.csv"
        path.write_text(CSV_TEXT, encoding="utf-8")

        status = get_data_status(path)

        assert status["exists"] is True
        assert status["size_bytes"] > 0
        assert status["path"] == str(path)

    def test_missing_file(self, tmp_path):
        status = get_data_status(tmp_path / "missing.csv")

        assert status["exists"] is False
        assert status["size_bytes"] == 0
