import unittest

from fastapi.testclient import TestClient

from backend.app import HEALTH_MESSAGE, create_app
from backend.auth import StaticTokenVerifier
from backend.config import Settings
from backend.store import InMemoryDocumentStore
from shared.firebase_constants import DAY_ASSIGNMENTS_COLLECTION, LABELS_COLLECTION

ALICE = {"Authorization": "Bearer alice-token"}
BOB = {"Authorization": "Bearer bob-token"}


def _log_payload(**overrides):
    payload = {
        "date": "2024-03-05",
        "activity": "Bench Press",
        "caloriesBurned": 120,
        "notes": "felt strong",
        "sets": [
            {"setType": "warmup", "measure": "kg", "value": "40", "reps": "10"},
            {"setType": "normal", "measure": "kg", "value": "60", "reps": "8"},
        ],
    }
    payload.update(overrides)
    return payload


class BackendApiTests(unittest.TestCase):
    def setUp(self):
        self.store = InMemoryDocumentStore()
        settings = Settings(use_in_memory_backends=True, _env_file=None)
        self.client = TestClient(
            create_app(
                settings,
                store=self.store,
                verifier=StaticTokenVerifier(
                    {"alice-token": "alice", "bob-token": "bob"}
                ),
            )
        )

    def _add_label(self, label="💪", description="Push day", headers=ALICE):
        response = self.client.post(
            "/trpc/label/add_label",
            json={"label": label, "description": description, "muscleGroups": ["chest"]},
            headers=headers,
        )
        self.assertEqual(response.status_code, 200, response.text)
        return response.json()["id"]

    def _assign(self, date, label_id, headers=ALICE):
        return self.client.post(
            "/trpc/label/assign_label_to_day",
            json={"date": date, "labelId": label_id},
            headers=headers,
        )

    def test_health_check(self):
        response = self.client.get("/")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.text, HEALTH_MESSAGE)

    def test_missing_or_unknown_token_is_unauthorized(self):
        response = self.client.post("/trpc/label/get_all_labels")
        self.assertEqual(response.status_code, 401)
        self.assertEqual(
            response.json()["detail"], "You must be logged in to access this resource."
        )

        response = self.client.post(
            "/trpc/label/get_all_labels",
            headers={"Authorization": "Bearer nope"},
        )
        self.assertEqual(response.status_code, 401)

        response = self.client.post(
            "/trpc/label/get_all_labels",
            headers={"Authorization": "alice-token"},
        )
        self.assertEqual(response.status_code, 401)

    def test_invalid_input_is_rejected(self):
        label_id = self._add_label()
        response = self._assign("2024-13-01", label_id)
        self.assertEqual(response.status_code, 422)

        response = self.client.post(
            "/trpc/label/add_label",
            json={"label": "x" * 11, "description": "too long"},
            headers=ALICE,
        )
        self.assertEqual(response.status_code, 422)

        response = self.client.post(
            "/trpc/label/get_all_labels_from_month",
            json={"date": "2024-00"},
            headers=ALICE,
        )
        self.assertEqual(response.status_code, 422)

    def test_label_crud(self):
        label_id = self._add_label()

        response = self.client.post(
            "/trpc/label/get_label_by_id", json={"id": label_id}, headers=ALICE
        )
        self.assertEqual(response.status_code, 200)
        label = response.json()
        self.assertEqual(label["label"], "💪")
        self.assertEqual(label["dates"], [])
        self.assertEqual(label["muscleGroups"], ["chest"])

        response = self.client.post(
            "/trpc/label/edit_label",
            json={"id": label_id, "description": "Chest and triceps"},
            headers=ALICE,
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["description"], "Chest and triceps")
        self.assertEqual(response.json()["label"], "💪")

        second_id = self._add_label(label="🦵", description="Leg day")
        response = self.client.post("/trpc/label/get_all_labels", headers=ALICE)
        self.assertEqual([l["id"] for l in response.json()], [second_id, label_id])

        response = self.client.post(
            "/trpc/label/delete_label", json={"id": label_id}, headers=ALICE
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["message"], "Label deleted successfully!")

        response = self.client.post(
            "/trpc/label/get_label_by_id", json={"id": label_id}, headers=ALICE
        )
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()["detail"], "Label not found.")

    def test_client_supplied_dates_are_ignored(self):
        response = self.client.post(
            "/trpc/label/add_label",
            json={"label": "🏃", "description": "Run", "dates": ["2024-01-01"]},
            headers=ALICE,
        )
        label_id = response.json()["id"]
        stored = self.store.docs("alice", LABELS_COLLECTION)[label_id]
        self.assertEqual(stored["dates"], [])

    def test_assign_switch_and_delete_assignment(self):
        push = self._add_label()
        legs = self._add_label(label="🦵", description="Leg day")

        response = self._assign("2024-03-05", push)
        self.assertEqual(response.status_code, 200)
        first = response.json()
        self.assertTrue(first["created"])
        self.assertEqual(first["message"], "Label assigned to day successfully!")

        response = self._assign("2024-03-05", legs)
        second = response.json()
        self.assertFalse(second["created"])
        self.assertEqual(second["id"], first["id"])
        self.assertEqual(second["message"], "Label assignment updated successfully!")

        labels = {
            l["id"]: l
            for l in self.client.post("/trpc/label/get_all_labels", headers=ALICE).json()
        }
        self.assertEqual(labels[push]["dates"], [])
        self.assertEqual(labels[legs]["dates"], ["2024-03-05"])

        response = self.client.post(
            "/trpc/label/get_label_assignment_by_date",
            json={"date": "2024-03-05"},
            headers=ALICE,
        )
        found = response.json()
        self.assertEqual(found["labelId"], legs)
        self.assertEqual(found["label"]["label"], "🦵")

        response = self.client.post(
            "/trpc/label/delete_assignment", json={"date": "2024-03-05"}, headers=ALICE
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["date"], "2024-03-05")

        response = self.client.post(
            "/trpc/label/get_label_assignment_by_date",
            json={"date": "2024-03-05"},
            headers=ALICE,
        )
        self.assertEqual(response.status_code, 200)
        self.assertIsNone(response.json())

        response = self.client.post(
            "/trpc/label/delete_assignment", json={"date": "2024-03-05"}, headers=ALICE
        )
        self.assertEqual(response.status_code, 404)
        self.assertEqual(
            response.json()["detail"], "No label assignment found for this date."
        )

    def test_assign_unknown_label_is_not_found(self):
        response = self._assign("2024-03-05", "missing")
        self.assertEqual(response.status_code, 404)
        self.assertEqual(self.store.docs("alice", DAY_ASSIGNMENTS_COLLECTION), {})

    def test_labels_from_month(self):
        push = self._add_label()
        legs = self._add_label(label="🦵", description="Leg day")
        self._assign("2024-02-29", push)
        self._assign("2024-02-01", legs)
        self._assign("2024-03-01", legs)

        response = self.client.post(
            "/trpc/label/get_all_labels_from_month",
            json={"date": "2024-02"},
            headers=ALICE,
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(
            response.json(),
            [
                {"date": "2024-02-01", "label": "🦵"},
                {"date": "2024-02-29", "label": "💪"},
            ],
        )

    def test_emoji_alias_serves_label_procedures(self):
        label_id = self._add_label()
        response = self.client.post("/trpc/emoji/get_all_labels", headers=ALICE)
        self.assertEqual(response.status_code, 200)
        self.assertEqual([l["id"] for l in response.json()], [label_id])

        response = self.client.post(
            "/trpc/emoji/assign_label_to_day",
            json={"date": "2024-04-01", "labelId": label_id},
            headers=ALICE,
        )
        self.assertEqual(response.status_code, 200)

    def test_users_are_isolated(self):
        label_id = self._add_label()
        response = self.client.post(
            "/trpc/label/get_label_by_id", json={"id": label_id}, headers=BOB
        )
        self.assertEqual(response.status_code, 404)
        response = self._assign("2024-03-05", label_id, headers=BOB)
        self.assertEqual(response.status_code, 404)

    def test_exercise_log_lifecycle(self):
        response = self.client.post(
            "/trpc/fitness/add_exercise_log", json=_log_payload(), headers=ALICE
        )
        self.assertEqual(response.status_code, 200, response.text)
        log_id = response.json()["id"]
        self.assertEqual(response.json()["message"], "Exercise log added successfully!")

        self.client.post(
            "/trpc/fitness/add_exercise_log",
            json=_log_payload(date="2024-03-20"),
            headers=ALICE,
        )

        response = self.client.post(
            "/trpc/fitness/get_exercise_log_by_id", json={"logId": log_id}, headers=ALICE
        )
        log = response.json()
        self.assertEqual(log["activity"], "Bench Press")
        self.assertEqual(log["caloriesBurned"], 120)
        self.assertEqual(log["sets"][0]["setType"], "warmup")

        response = self.client.post(
            "/trpc/fitness/get_exercise_log_by_date",
            json={"date": "2024-03-05"},
            headers=ALICE,
        )
        self.assertEqual([l["id"] for l in response.json()], [log_id])

        response = self.client.post(
            "/trpc/fitness/get_exercise_logs_by_month",
            json={"month": "2024-03"},
            headers=ALICE,
        )
        body = response.json()
        self.assertEqual(len(body["logs"]), 2)
        self.assertEqual(body["uniqueDates"], ["2024-03-05", "2024-03-20"])

        response = self.client.post(
            "/trpc/fitness/get_all_exercise_names", headers=ALICE
        )
        self.assertEqual(
            [n["name"] for n in response.json()["names"]], ["Bench Press"]
        )

        response = self.client.post(
            "/trpc/fitness/edit_exercise_log",
            json={"logId": log_id, "data": _log_payload(notes="edited")},
            headers=ALICE,
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["message"], "Exercise log updated successfully!")

        response = self.client.post(
            "/trpc/fitness/get_latest_exercise_by_name",
            json={"name": "Bench Press"},
            headers=ALICE,
        )
        self.assertEqual(response.json()["date"], "2024-03-20")

        response = self.client.post(
            "/trpc/fitness/delete_exercise_log", json={"id": log_id}, headers=ALICE
        )
        self.assertEqual(response.status_code, 200)
        response = self.client.post(
            "/trpc/fitness/get_exercise_log_by_id", json={"logId": log_id}, headers=ALICE
        )
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()["detail"], "Exercise log not found.")

    def test_exercise_log_validation(self):
        response = self.client.post(
            "/trpc/fitness/add_exercise_log",
            json=_log_payload(activity="ab"),
            headers=ALICE,
        )
        self.assertEqual(response.status_code, 422)

        bad_set = {"setType": "heavy", "measure": "kg"}
        response = self.client.post(
            "/trpc/fitness/add_exercise_log",
            json=_log_payload(sets=[bad_set]),
            headers=ALICE,
        )
        self.assertEqual(response.status_code, 422)

    def test_delete_exercise_name(self):
        self.client.post(
            "/trpc/fitness/add_exercise_log", json=_log_payload(), headers=ALICE
        )
        response = self.client.post(
            "/trpc/fitness/delete_exercise_name",
            json={"name": "Bench Press"},
            headers=ALICE,
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(len(response.json()["deletedIds"]), 1)

        response = self.client.post(
            "/trpc/fitness/delete_exercise_name",
            json={"name": "Bench Press"},
            headers=ALICE,
        )
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()["detail"], "Exercise name not found.")


if __name__ == "__main__":
    unittest.main()
