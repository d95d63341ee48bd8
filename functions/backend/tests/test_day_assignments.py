import unittest

from backend import day_assignments, labels
from backend.errors import NotFoundError
from backend.schemas import LabelCreateRequest
from backend.store import InMemoryDocumentStore
from shared.firebase_constants import DAY_ASSIGNMENTS_COLLECTION, LABELS_COLLECTION

UID = "user-1"


class DayAssignmentTests(unittest.TestCase):
    def setUp(self):
        self.store = InMemoryDocumentStore()
        self.push = self._label("💪", "Push")
        self.legs = self._label("🦵", "Legs")

    def _label(self, text, description):
        return labels.add_label(
            self.store, UID, LabelCreateRequest(label=text, description=description)
        )

    def _dates(self, label_id):
        return labels.get_label(self.store, UID, label_id).dates

    def _assignments(self):
        return list(self.store.docs(UID, DAY_ASSIGNMENTS_COLLECTION).values())

    def test_first_assignment_creates_and_records_date(self):
        result = day_assignments.assign_label_to_day(self.store, UID, "2024-03-05", self.push)
        self.assertTrue(result.created)
        self.assertEqual(result.message, "Label assigned to day successfully!")
        self.assertEqual(self._dates(self.push), ["2024-03-05"])
        self.assertEqual(len(self._assignments()), 1)

    def test_reassigning_moves_date_between_labels(self):
        first = day_assignments.assign_label_to_day(self.store, UID, "2024-03-05", self.push)
        second = day_assignments.assign_label_to_day(self.store, UID, "2024-03-05", self.legs)

        self.assertFalse(second.created)
        self.assertEqual(second.id, first.id)
        self.assertEqual(self._dates(self.push), [])
        self.assertEqual(self._dates(self.legs), ["2024-03-05"])
        self.assertEqual(len(self._assignments()), 1)
        self.assertEqual(self._assignments()[0]["labelId"], self.legs)

    def test_assigning_same_label_twice_is_idempotent(self):
        day_assignments.assign_label_to_day(self.store, UID, "2024-03-05", self.push)
        result = day_assignments.assign_label_to_day(self.store, UID, "2024-03-05", self.push)

        self.assertFalse(result.created)
        self.assertEqual(self._dates(self.push), ["2024-03-05"])
        self.assertEqual(len(self._assignments()), 1)

    def test_unknown_label_writes_nothing(self):
        day_assignments.assign_label_to_day(self.store, UID, "2024-03-05", self.push)
        before = self._assignments()

        with self.assertRaises(NotFoundError) as ctx:
            day_assignments.assign_label_to_day(self.store, UID, "2024-03-05", "missing")

        self.assertEqual(ctx.exception.message, "Label not found.")
        self.assertEqual(self._assignments(), before)
        self.assertEqual(self._dates(self.push), ["2024-03-05"])

    def test_reassign_away_from_deleted_label(self):
        day_assignments.assign_label_to_day(self.store, UID, "2024-03-05", self.push)
        # Drop the label document directly so the assignment is left dangling.
        self.store.docs(UID, LABELS_COLLECTION).pop(self.push)

        result = day_assignments.assign_label_to_day(self.store, UID, "2024-03-05", self.legs)

        self.assertFalse(result.created)
        self.assertEqual(self._dates(self.legs), ["2024-03-05"])

    def test_lookup_returns_assignment_with_label(self):
        day_assignments.assign_label_to_day(self.store, UID, "2024-03-05", self.push)
        assignment, label = day_assignments.get_assignment_by_date(
            self.store, UID, "2024-03-05"
        )
        self.assertEqual(assignment.label_id, self.push)
        self.assertEqual(label.label, "💪")
        self.assertIsNone(day_assignments.get_assignment_by_date(self.store, UID, "2024-03-06"))

    def test_lookup_removes_orphaned_assignment(self):
        day_assignments.assign_label_to_day(self.store, UID, "2024-03-05", self.push)
        self.store.docs(UID, LABELS_COLLECTION).pop(self.push)

        self.assertIsNone(day_assignments.get_assignment_by_date(self.store, UID, "2024-03-05"))
        self.assertEqual(self._assignments(), [])

    def test_delete_assignment_clears_label_date(self):
        day_assignments.assign_label_to_day(self.store, UID, "2024-03-05", self.push)
        day_assignments.assign_label_to_day(self.store, UID, "2024-03-06", self.push)

        deleted = day_assignments.delete_assignment(self.store, UID, "2024-03-05")

        self.assertEqual(deleted.date, "2024-03-05")
        self.assertEqual(self._dates(self.push), ["2024-03-06"])
        with self.assertRaises(NotFoundError):
            day_assignments.delete_assignment(self.store, UID, "2024-03-05")

    def test_month_query_uses_real_month_length(self):
        for date in ["2024-02-01", "2024-02-29", "2024-03-01", "2024-01-31"]:
            day_assignments.assign_label_to_day(self.store, UID, date, self.push)

        entries = day_assignments.get_assignments_in_month(self.store, UID, "2024-02")
        self.assertEqual([e.date for e in entries], ["2024-02-01", "2024-02-29"])
        self.assertTrue(all(e.label == "💪" for e in entries))

        day_assignments.assign_label_to_day(self.store, UID, "2023-02-28", self.legs)
        entries = day_assignments.get_assignments_in_month(self.store, UID, "2023-02")
        self.assertEqual([(e.date, e.label) for e in entries], [("2023-02-28", "🦵")])

    def test_month_query_drops_every_orphan(self):
        for date in ["2024-05-01", "2024-05-02", "2024-05-03"]:
            day_assignments.assign_label_to_day(self.store, UID, date, self.push)
        day_assignments.assign_label_to_day(self.store, UID, "2024-05-04", self.legs)
        self.store.docs(UID, LABELS_COLLECTION).pop(self.push)

        entries = day_assignments.get_assignments_in_month(self.store, UID, "2024-05")

        self.assertEqual([e.date for e in entries], ["2024-05-04"])
        self.assertEqual(len(self._assignments()), 1)

    def test_assignments_stored_with_emoji_id_are_still_read(self):
        self.store.docs(UID, DAY_ASSIGNMENTS_COLLECTION)["legacy"] = {
            "date": "2024-06-10",
            "emojiId": self.push,
        }

        entries = day_assignments.get_assignments_in_month(self.store, UID, "2024-06")
        self.assertEqual([(e.date, e.label) for e in entries], [("2024-06-10", "💪")])

        result = day_assignments.assign_label_to_day(self.store, UID, "2024-06-10", self.legs)
        self.assertFalse(result.created)
        self.assertEqual(result.id, "legacy")
        self.assertEqual(len(self._assignments()), 1)

        self.assertEqual(labels.delete_label(self.store, UID, self.legs), 1)
        self.assertEqual(self._assignments(), [])

    def test_empty_month(self):
        self.assertEqual(day_assignments.get_assignments_in_month(self.store, UID, "2024-07"), [])

    def test_invalid_month_raises(self):
        with self.assertRaises(ValueError):
            day_assignments.get_assignments_in_month(self.store, UID, "2024-13")

    def test_deleting_label_removes_its_assignments(self):
        day_assignments.assign_label_to_day(self.store, UID, "2024-03-05", self.push)
        day_assignments.assign_label_to_day(self.store, UID, "2024-03-06", self.push)
        day_assignments.assign_label_to_day(self.store, UID, "2024-03-07", self.legs)

        removed = labels.delete_label(self.store, UID, self.push)

        self.assertEqual(removed, 2)
        self.assertEqual([a["date"] for a in self._assignments()], ["2024-03-07"])
        with self.assertRaises(NotFoundError):
            labels.delete_label(self.store, UID, self.push)

    def test_one_assignment_per_date_across_many_switches(self):
        for label_id in [self.push, self.legs, self.push, self.legs, self.legs]:
            day_assignments.assign_label_to_day(self.store, UID, "2024-03-05", label_id)

        self.assertEqual(len(self._assignments()), 1)
        self.assertEqual(self._dates(self.push), [])
        self.assertEqual(self._dates(self.legs), ["2024-03-05"])


if __name__ == "__main__":
    unittest.main()
