# Copyright 2026 Firefly Software Solutions Inc.
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
"""Tests for the LoggingPort protocol."""

from typing import Any

from aspectweave.core.config import Config
from aspectweave.logging import LoggingPort, StructlogAdapter


class RecordingLogging:
    def __init__(self):
        self.levels: dict[str, str] = {}

    def configure(self, config: Config) -> None:
        self.levels["root"] = config.get("aspectweave.logging.level.root", "INFO")

    def get_logger(self, name: str) -> Any:
        return name

    def set_level(self, name: str, level: str) -> None:
        self.levels[name] = level


class TestLoggingPortProtocol:
    def test_custom_adapter_conforms(self):
        adapter = RecordingLogging()
        assert isinstance(adapter, LoggingPort)
        adapter.configure(Config({"aspectweave": {"logging": {"level": {"root": "WARNING"}}}}))
        assert adapter.levels == {"root": "WARNING"}

    def test_default_adapter_conforms(self):
        assert isinstance(StructlogAdapter(), LoggingPort)

    def test_missing_methods_do_not_conform(self):
        class Incomplete:
            def get_logger(self, name: str) -> Any:
                return None

        assert not isinstance(Incomplete(), LoggingPort)
