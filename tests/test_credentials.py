"""
Tests for credential providers and the selection gate.
"""

import pytest

from veo_continuity.core.exceptions import (
    GenerationFailedError,
    UpstreamRequestError,
    ValidationError,
)
from veo_continuity.workflow import (
    CredentialGate,
    EnvCredentialProvider,
    StaticCredentialProvider,
)


@pytest.fixture
def clean_env(monkeypatch):
    for name in ("GEMINI_API_KEY", "GOOGLE_API_KEY", "API_KEY"):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_env_provider_uses_first_set_variable(clean_env):
    clean_env.setenv("API_KEY", "from-api-key")
    clean_env.setenv("GOOGLE_API_KEY", "from-google")

    assert EnvCredentialProvider().get_credential() == "from-google"


def test_env_provider_without_variables(clean_env):
    assert EnvCredentialProvider().get_credential() is None


def test_static_provider_treats_empty_as_missing():
    assert StaticCredentialProvider("").get_credential() is None
    assert StaticCredentialProvider("k").get_credential() == "k"


class TestCredentialGate:
    def test_selection_runs_selector(self):
        calls = []

        def selector():
            calls.append(1)
            return "picked"

        gate = CredentialGate(selector)
        assert not gate.has_selected_credential
        assert gate.get_credential() is None

        assert gate.select()
        assert gate.has_selected_credential
        assert gate.get_credential() == "picked"
        assert len(calls) == 1

    def test_empty_selection_is_not_selected(self):
        gate = CredentialGate(lambda: None)
        assert not gate.select()
        assert not gate.has_selected_credential

    def test_fallback_used_until_selected(self):
        gate = CredentialGate(lambda: "picked", fallback=StaticCredentialProvider("env"))
        assert gate.get_credential() == "env"
        gate.select()
        assert gate.get_credential() == "picked"

    @pytest.mark.parametrize(
        "error, invalidates",
        [
            (UpstreamRequestError("x", status_code=404, upstream_status="NOT_FOUND"), True),
            (UpstreamRequestError("x", status_code=403, upstream_status="PERMISSION_DENIED"), True),
            (UpstreamRequestError("x", status_code=401), True),
            (UpstreamRequestError("x", status_code=400, upstream_status="INVALID_ARGUMENT"), False),
            (UpstreamRequestError("Requested entity was not found.", status_code=500), False),
            (GenerationFailedError("x", upstream_code=5), True),
            (GenerationFailedError("x", upstream_code=3), False),
            (ValidationError("x"), False),
            (RuntimeError("boom"), False),
        ],
    )
    def test_handle_error(self, error, invalidates):
        gate = CredentialGate(lambda: "picked")
        gate.select()

        assert gate.handle_error(error) is invalidates
        assert gate.has_selected_credential is not invalidates
