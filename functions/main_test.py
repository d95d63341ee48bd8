# Copyright 2025 Google LLC
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
# ==============================================================================
# Standard library imports
import unittest
from types import SimpleNamespace
from unittest.mock import patch

# Third-party library imports
from firebase_functions import https_fn
from google.api_core import exceptions

# Local application imports
# This patch must be applied before importing 'main'
with patch("firebase_admin.initialize_app"):
    import main
from backend.procedures import PROCEDURES
from backend.store import FirestoreDocumentStore, InMemoryDocumentStore


def _request(data=None, uid="user-1"):
    auth = SimpleNamespace(uid=uid, token={}) if uid else None
    return SimpleNamespace(data=data, auth=auth)


class TestMainInvoke(unittest.TestCase):

    def setUp(self):
        self.store = InMemoryDocumentStore()
        patcher = patch("main._get_store", return_value=self.store)
        patcher.start()
        self.addCleanup(patcher.stop)

    def _add_label(self):
        result = main._invoke(
            _request({"label": "💪", "description": "Push day"}), "label.addLabel"
        )
        return result["id"]

    def test_requires_auth(self):
        with self.assertRaises(https_fn.HttpsError) as ctx:
            main._invoke(_request({}, uid=None), "label.getAllLabels")
        self.assertEqual(ctx.exception.code, https_fn.FunctionsErrorCode.UNAUTHENTICATED)

    def test_invalid_argument_carries_details(self):
        with self.assertRaises(https_fn.HttpsError) as ctx:
            main._invoke(
                _request({"date": "05/03/2024", "labelId": "x"}),
                "label.assignLabelToDay",
            )
        self.assertEqual(ctx.exception.code, https_fn.FunctionsErrorCode.INVALID_ARGUMENT)
        self.assertEqual(ctx.exception.details[0]["loc"], ["date"])

    def test_assign_and_read_back(self):
        label_id = self._add_label()

        result = main._invoke(
            _request({"date": "2024-03-05", "labelId": label_id}),
            "label.assignLabelToDay",
        )
        self.assertTrue(result["created"])
        self.assertEqual(result["labelId"], label_id)

        found = main._invoke(
            _request({"date": "2024-03-05"}), "label.getLabelAssignmentByDate"
        )
        self.assertEqual(found["label"]["dates"], ["2024-03-05"])

        month = main._invoke(_request({"date": "2024-03"}), "label.getAllLabelsFromMonth")
        self.assertEqual(month, [{"date": "2024-03-05", "label": "💪"}])

    def test_no_payload_procedure(self):
        self._add_label()
        labels = main._invoke(_request(None), "label.getAllLabels")
        self.assertEqual(len(labels), 1)
        self.assertIn("createdAt", labels[0])

    def test_not_found(self):
        with self.assertRaises(https_fn.HttpsError) as ctx:
            main._invoke(_request({"id": "missing"}), "label.getLabelById")
        self.assertEqual(ctx.exception.code, https_fn.FunctionsErrorCode.NOT_FOUND)
        self.assertEqual(ctx.exception.message, "Label not found.")

    def test_quota_errors_map_to_resource_exhausted(self):
        with patch.object(
            InMemoryDocumentStore,
            "for_user",
            side_effect=exceptions.TooManyRequests("quota"),
        ):
            with self.assertRaises(https_fn.HttpsError) as ctx:
                main._invoke(_request(None), "label.getAllLabels")
        self.assertEqual(
            ctx.exception.code, https_fn.FunctionsErrorCode.RESOURCE_EXHAUSTED
        )

    def test_every_procedure_has_a_callable(self):
        for name in PROCEDURES:
            namespace, procedure = name.split(".")
            snake = "".join("_" + c.lower() if c.isupper() else c for c in procedure)
            self.assertTrue(
                hasattr(main, f"{namespace}_{snake}"), f"no callable for {name}"
            )


class TestMainStore(unittest.TestCase):

    def setUp(self):
        main._store = None
        self.addCleanup(setattr, main, "_store", None)

    @patch("main.firestore")
    def test_store_is_built_once_from_default_app(self, mock_firestore):
        first = main._get_store()
        second = main._get_store()

        self.assertIs(first, second)
        self.assertIsInstance(first, FirestoreDocumentStore)
        self.assertIs(first.client, mock_firestore.client.return_value)
        mock_firestore.client.assert_called_once_with()


if __name__ == "__main__":
    unittest.main()
