"""Global test fixtures."""

import os

import logfire

# Set JWT secret before any test modules import Config
# This must happen at module load time, not in a fixture
os.environ.setdefault("IDGATE_AUTH__JWT__SECRET", "test-secret-for-unit-tests-min-32")
os.environ.setdefault("IDGATE_DATABASE__URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("IDGATE_DATABASE__AUTO_MIGRATE", "false")

# Instrumentation in create_app expects logfire to be configured
logfire.configure(send_to_logfire=False, console=False)
