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

# Root collection; every other collection is nested under users/{uid}/.
USERS_COLLECTION = "users"

LABELS_COLLECTION = "labels"
DAY_ASSIGNMENTS_COLLECTION = "dayAssignments"
FITNESS_LOGS_COLLECTION = "fitnessLogs"
EXERCISE_NAMES_COLLECTION = "exerciseNames"

# Firestore rejects batches over 500 writes; stay below it.
MAX_BATCH_WRITES = 450
SCAN_PAGE_SIZE = 500
