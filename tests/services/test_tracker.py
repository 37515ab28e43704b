import io
import json
import pytest
from datetime import date

from errors import (
    InvalidDateError,
    RejectionReason,
    StorageError,
    TabularFormatError,
    TransactionRejectedError,
)
from ingestion.transactions_csv import read_rows
from models.transaction import Transaction
from services.taxonomy import TaxonomyStore
from services.tracker import BatchResult, ExpenseTracker, RowRejection
from tests.helpers import csv_text, parsed, write_csv

ROUND_TRIP_LINES = [
    "05.01.2024,45.60,,food,groceries,coop,weekly shop",
    "06.01.2024,3.20,,transport,,,",
    "07.01.2024,,5000.00,salary,,work,",
    '08.01.2024,12.50,,food,restaurant,,"lunch, team"',
    "09.01.2024,1234.50,,housing,rent,,",
    "10.01.2024,8.90,,food,groceries,,",
]


class TestAddTransaction:
    """Tests for ExpenseTracker.add_transaction."""

    def test_add_transactions_valid(self, tracker):
        """Test that valid transactions are retained in order."""
        first = tracker.add_transaction(parsed("Food", "Groceries"))
        second = tracker.add_transaction(parsed("Transport"))

        assert tracker.transactions == (first, second)
        assert first.category == "food"
        assert second.category == "transport"

    def test_add_transaction_invalid_category(self, tracker):
        """Test that an invalid transaction raises and is not retained."""
        with pytest.raises(TransactionRejectedError, match="Invalid category"):
            tracker.add_transaction(parsed("Housing"))

        assert tracker.transactions == ()

    def test_transactions_view_is_read_only(self, tracker):
        """Test that the transactions property is a tuple snapshot."""
        tracker.add_transaction(parsed("Transport"))

        assert isinstance(tracker.transactions, tuple)


class TestReplaceTransaction:
    """Tests for ExpenseTracker.replace_transaction."""

    def test_replace_transaction(self, tracker):
        """Test replacing a retained transaction with a valid one."""
        tracker.add_transaction(parsed("Transport", amount=-3.2))

        replacement = tracker.replace_transaction(0, parsed("Food", "Restaurant", amount=-20.0))

        assert tracker.transactions == (replacement,)
        assert replacement.subcategory == "restaurant"

    def test_rejected_replacement_keeps_original(self, tracker):
        """Test that an invalid replacement leaves the original in place."""
        original = tracker.add_transaction(parsed("Transport"))

        with pytest.raises(TransactionRejectedError):
            tracker.replace_transaction(0, parsed("Food"))

        assert tracker.transactions == (original,)

    def test_replace_out_of_range(self, tracker):
        """Test that replacing a missing index raises IndexError."""
        with pytest.raises(IndexError):
            tracker.replace_transaction(0, parsed("Transport"))


class TestLoadTransactions:
    """Tests for ExpenseTracker.load_transactions."""

    def test_load_without_auto_create(self, tracker):
        """Test that rows are validated against the existing taxonomy only."""
        rows = [
            ["15.01.2024", "45.60", "", "Food", "Groceries", "", ""],
            ["15.01.2024", "12.00", "", "Food", "", "", ""],
            ["16.01.2024", "900.00", "", "Housing", "", "", ""],
            ["17.01.2024", "3.20", "", "Transport", "Train", "", ""],
            ["18.01.2024", "3.20", "", "Transport", "", "", ""],
        ]

        result = tracker.load_transactions(rows, auto_create_taxonomy=False)

        assert result.total_rows == 5
        assert result.accepted == 2
        assert result.rejected == 3
        assert [r.reason for r in result.rejections] == [
            RejectionReason.MISSING_OR_INVALID_SUBCATEGORY,
            RejectionReason.INVALID_CATEGORY,
            RejectionReason.UNEXPECTED_SUBCATEGORY,
        ]
        assert [r.line_number for r in result.rejections] == [2, 3, 4]
        assert tracker.taxonomy.find_category("housing") is None

    def test_load_with_auto_create(self):
        """Test that the taxonomy is built from the rows themselves."""
        tracker = ExpenseTracker()
        rows = [
            ["15.01.2024", "45.60", "", "Food", "Groceries", "", ""],
            ["16.01.2024", "12.00", "", "Food", "Restaurant", "", ""],
            ["17.01.2024", "3.20", "", "Transport", "", "", ""],
        ]

        result = tracker.load_transactions(rows, auto_create_taxonomy=True)

        assert result.accepted == 3
        assert result.rejected == 0
        food = tracker.taxonomy.find_category("food")
        assert food.created_on == date(2024, 1, 15)
        assert [(s.name, s.created_on) for s in food.subcategories] == [
            ("groceries", date(2024, 1, 15)),
            ("restaurant", date(2024, 1, 16)),
        ]

    def test_auto_create_still_rejects_inconsistent_rows(self):
        """Test that a row without sub-category is rejected once its category has some."""
        tracker = ExpenseTracker()
        rows = [
            ["15.01.2024", "45.60", "", "Food", "Groceries", "", ""],
            ["16.01.2024", "12.00", "", "Food", "", "", ""],
        ]

        result = tracker.load_transactions(rows, auto_create_taxonomy=True)

        assert result.accepted == 1
        assert result.rejections[0].reason == RejectionReason.MISSING_OR_INVALID_SUBCATEGORY

    def test_auto_create_accepts_earlier_row_before_subcategory_exists(self):
        """Test that rows are validated against the taxonomy as built so far."""
        tracker = ExpenseTracker()
        rows = [
            ["15.01.2024", "3.20", "", "Transport", "", "", ""],
            ["16.01.2024", "3.20", "", "Transport", "Train", "", ""],
        ]

        result = tracker.load_transactions(rows, auto_create_taxonomy=True)

        assert result.accepted == 2
        assert [t.subcategory for t in tracker.transactions] == [None, "train"]

    def test_unparsable_row_does_not_stop_batch(self):
        """Test that a bad date in row 3 of 10 only skips that row."""
        tracker = ExpenseTracker()
        rows = [
            [f"{day:02d}.01.2024", "10.00", "", "Food", "", "", ""] for day in range(1, 11)
        ]
        rows[2][0] = "32.01.2024"

        result = tracker.load_transactions(rows, auto_create_taxonomy=True)

        assert result.total_rows == 10
        assert result.accepted == 9
        assert result.rejected == 1
        rejection = result.rejections[0]
        assert rejection.line_number == 3
        assert isinstance(rejection.error, InvalidDateError)
        assert rejection.reason is None
        assert result.parse_errors == [rejection]
        assert [t.date.day for t in tracker.transactions] == [1, 2, 4, 5, 6, 7, 8, 9, 10]

    def test_empty_rows_are_skipped(self, tracker):
        """Test that blank lines are not counted as rows."""
        rows = [[], ["18.01.2024", "3.20", "", "Transport", "", "", ""], []]

        result = tracker.load_transactions(rows, auto_create_taxonomy=False)

        assert result.total_rows == 1
        assert result.accepted == 1

    def test_structural_error_aborts_batch(self):
        """Test that an unreadable CSV aborts without retaining any of its rows."""
        tracker = ExpenseTracker()
        source = io.StringIO(
            csv_text(
                [
                    "15.01.2024,45.60,,food,,,",
                    "16.01.2024,3.20,,transport,,,",
                    '17.01.2024,1.00,,"bro"ken,,,',
                ]
            )
        )

        with pytest.raises(TabularFormatError):
            tracker.load_transactions(read_rows(source), auto_create_taxonomy=True)

        assert tracker.transactions == ()

    def test_loads_accumulate(self, tracker):
        """Test that consecutive batches append to the same collection."""
        tracker.load_transactions([["15.01.2024", "1.00", "", "Transport"]], False)
        tracker.load_transactions([["16.01.2024", "2.00", "", "Transport"]], False)

        assert len(tracker.transactions) == 2


class TestBatchResult:
    """Tests for BatchResult."""

    def test_summary(self):
        """Test the one-line summary."""
        result = BatchResult(
            total_rows=3,
            accepted=1,
            rejections=[
                RowRejection(2, InvalidDateError("x")),
                RowRejection(
                    3,
                    TransactionRejectedError(RejectionReason.INVALID_CATEGORY, "x", None),
                ),
            ],
        )

        assert result.summary() == "Read: 3 | Accepted: 1 | Ignored: 2 (1 unparsable)"


class TestFiles:
    """Tests for reading and writing transaction files."""

    def test_round_trip(self, tmp_path):
        """Test that loading then writing reproduces the input byte for byte."""
        input_path = write_csv(tmp_path / "transactions.csv", ROUND_TRIP_LINES)
        output_path = tmp_path / "transactions_out.csv"
        tracker = ExpenseTracker()

        result = tracker.load_transactions_from_file(input_path, auto_create_taxonomy=True)
        count = tracker.write_transactions_to_file(output_path)

        assert result.accepted == len(ROUND_TRIP_LINES)
        assert count == len(ROUND_TRIP_LINES)
        assert output_path.read_bytes() == input_path.read_bytes()

    def test_line_numbers_count_header(self, tmp_path):
        """Test that rejections report the line number in the file."""
        input_path = write_csv(
            tmp_path / "transactions.csv",
            ["05.01.2024,1.00,,food,,,", "bad,1.00,,food,,,"],
        )
        tracker = ExpenseTracker()

        result = tracker.load_transactions_from_file(input_path)

        assert result.rejections[0].line_number == 3

    def test_line_numbers_after_multiline_note(self, tmp_path):
        """Test that a note spanning two lines does not shift later rejections."""
        input_path = write_csv(
            tmp_path / "transactions.csv",
            ['05.01.2024,1.00,,food,,,"line one\nline two"', "bad,1.00,,food,,,"],
        )
        tracker = ExpenseTracker()

        result = tracker.load_transactions_from_file(input_path)

        assert result.accepted == 1
        assert tracker.transactions[0].note == "line one\nline two"
        assert result.rejections[0].line_number == 4

    def test_write_transactions_to_stream(self, tracker):
        """Test writing to an already open text stream."""
        tracker.add_transaction(parsed("Transport", amount=-3.2))
        destination = io.StringIO()

        assert tracker.write_transactions(destination) == 1
        assert destination.getvalue().splitlines()[1] == "15.01.2024,3.20,,transport,,,"

    def test_missing_input_file(self, tmp_path):
        """Test that a missing CSV raises StorageError with the path."""
        tracker = ExpenseTracker()
        path = tmp_path / "missing.csv"

        with pytest.raises(StorageError) as exc_info:
            tracker.load_transactions_from_file(path)

        assert exc_info.value.path == path
        assert isinstance(exc_info.value.__cause__, FileNotFoundError)

    def test_unwritable_output(self, tmp_path, tracker):
        """Test that writing to a directory raises StorageError."""
        with pytest.raises(StorageError):
            tracker.write_transactions_to_file(tmp_path)


class TestTaxonomyPersistence:
    """Tests for save_taxonomy and load_taxonomy."""

    def test_save_and_load(self, tmp_path, tracker):
        """Test that the saved taxonomy loads back identically."""
        path = tmp_path / "config" / "taxonomy.json"

        tracker.save_taxonomy(path)
        loaded = ExpenseTracker.load_taxonomy(path)

        assert loaded.find_all() == tracker.taxonomy.find_all()

    def test_transactions_are_not_saved(self, tmp_path, tracker):
        """Test that only the taxonomy is part of the file."""
        tracker.add_transaction(parsed("Transport"))
        path = tmp_path / "taxonomy.json"

        tracker.save_taxonomy(path)

        data = json.loads(path.read_text())
        assert list(data.keys()) == ["categories"]
        assert [c["name"] for c in data["categories"]] == ["food", "transport"]

    def test_from_taxonomy_file(self, tmp_path, tracker):
        """Test creating a tracker from a saved taxonomy."""
        path = tmp_path / "taxonomy.json"
        tracker.save_taxonomy(path)

        restored = ExpenseTracker.from_taxonomy_file(path)

        assert restored.transactions == ()
        assert restored.taxonomy.find_subcategory("food", "restaurant") is not None

    def test_load_missing_file(self, tmp_path):
        """Test that a missing taxonomy file raises StorageError."""
        with pytest.raises(StorageError, match="Failed to read categories"):
            ExpenseTracker.load_taxonomy(tmp_path / "missing.json")

    def test_load_invalid_json(self, tmp_path):
        """Test that a file that is not JSON raises StorageError."""
        path = tmp_path / "taxonomy.json"
        path.write_text("{not json")

        with pytest.raises(StorageError, match="Malformed taxonomy file"):
            ExpenseTracker.load_taxonomy(path)

    def test_load_schema_violation(self, tmp_path):
        """Test that a category without creation date raises StorageError."""
        path = tmp_path / "taxonomy.json"
        path.write_text(json.dumps({"categories": [{"name": "food"}]}))

        with pytest.raises(StorageError, match="Malformed taxonomy file"):
            ExpenseTracker.load_taxonomy(path)

    def test_load_duplicate_subcategory(self, tmp_path):
        """Test that a sub-category listed twice raises StorageError."""
        path = tmp_path / "taxonomy.json"
        path.write_text(
            json.dumps(
                {
                    "categories": [
                        {
                            "name": "food",
                            "created_on": "2024-01-01",
                            "subcategories": [
                                {"name": "groceries", "created_on": "2024-01-01"},
                                {"name": "Groceries", "created_on": "2024-01-02"},
                            ],
                        }
                    ]
                }
            )
        )

        with pytest.raises(StorageError):
            ExpenseTracker.load_taxonomy(path)

    def test_save_to_unwritable_path(self, tmp_path, tracker):
        """Test that a path below a regular file raises StorageError."""
        blocker = tmp_path / "blocker"
        blocker.write_text("")

        with pytest.raises(StorageError):
            tracker.save_taxonomy(blocker / "taxonomy.json")


class TestRebuildTaxonomy:
    """Tests for ExpenseTracker.rebuild_taxonomy_from_transactions."""

    def test_rebuild_into_empty_taxonomy(self, tracker):
        """Test that a fresh store is filled from retained transactions."""
        tracker.add_transaction(parsed("Food", "Groceries", on=date(2024, 2, 1)))
        tracker.add_transaction(parsed("Transport", on=date(2024, 2, 2)))
        tracker.taxonomy = TaxonomyStore()

        added = tracker.rebuild_taxonomy_from_transactions()

        assert added == 3
        assert tracker.taxonomy.find_subcategory("food", "groceries").created_on == date(2024, 2, 1)
        assert tracker.taxonomy.find_category("transport") is not None

    def test_rebuild_is_idempotent(self, tracker):
        """Test that existing entries are not added again."""
        tracker.add_transaction(parsed("Food", "Groceries"))

        assert tracker.rebuild_taxonomy_from_transactions() == 0
