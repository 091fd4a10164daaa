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

DEFAULT_AUTHOR = "Patryk"
DEFAULT_BOARD = "default"
DEFAULT_PIN_SIZE = "medium"

# Tags a fresh composer starts with.
DEFAULT_COMPOSER_TAGS = ("Default", "Pin")

PINS_COLLECTION = "pins"

MAX_IMAGE_SIZE_MB = 1.0

RANDOM_PIN_SOURCE_URL = "https://picsum.photos/{width}/{height}"
REQUEST_TIMEOUT_SECONDS = 30.0

MAX_TITLE_LENGTH = 256
MAX_DESCRIPTION_LENGTH = 2048
MAX_TAG_LENGTH = 64

# Lines shown while the help modal is open.
GUIDELINES = (
    "Click the plus icon to add a new pin.",
    "Upload an image, give it a title, a description and a destination link.",
    "Type a tag and press Enter to add it; tags make pins searchable.",
    "Use the search bar to filter pins by tag.",
    "Click a pin to open it, and delete it from the detail view.",
    "The shuffle icon generates a random pin, the arrows refresh the board.",
)
