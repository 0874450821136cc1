import pytest

from env_decrypt.context import EnvironmentContext


@pytest.mark.parametrize("name", ["staging", "production", "local", "qa-2"])
def test_file_names_follow_environment_name(name):
    context = EnvironmentContext.from_environ({"APP_ENV": name})

    assert context.environment_name == name
    assert context.plain_file_name == f".env.{name}"
    assert context.encrypted_file_name == f".env.{name}.encrypted"


def test_missing_or_empty_environment_defaults_to_production():
    assert EnvironmentContext.from_environ({}).environment_name == "production"
    assert EnvironmentContext.from_environ({"APP_ENV": ""}).environment_name == "production"


def test_custom_variable_and_default():
    context = EnvironmentContext.from_environ({"DEPLOY_ENV": "edge"}, env_var="DEPLOY_ENV")
    fallback = EnvironmentContext.from_environ({"APP_ENV": "ignored"}, env_var="DEPLOY_ENV", default="dev")

    assert context.encrypted_file_name == ".env.edge.encrypted"
    assert fallback.plain_file_name == ".env.dev"
