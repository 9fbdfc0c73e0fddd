"""
CodePush app registration and deployment key lookup
"""
import enum
import json
from typing import NamedTuple

from .errors import CodePushError
from .shell import run_command

PLATFORMS = ("android", "ios")
STAGING = "Staging"


class RegistrationResult(enum.Enum):
    CREATED = "created"
    ALREADY_EXISTS = "already_exists"
    FAILED = "failed"


class DeploymentKeys(NamedTuple):
    android: str
    ios: str


def codepush_app_name(app_name: str, platform: str) -> str:
    return f"{app_name}-{platform}"


def register_app(name: str, platform: str) -> RegistrationResult:
    """Create the CodePush app `name` for `platform`.

    A failure that says the app already exists is an expected outcome. Any
    other failure is reported as FAILED and left for the key lookup to surface.
    """
    print(f"Creating CodePush app \"{name}\" to release updates for {platform}...")
    result = run_command(["code-push", "app", "add", name, platform, "react-native"], check=False)
    if result.returncode == 0:
        print(f"App \"{name}\" has been created \n")
        return RegistrationResult.CREATED

    output = f"{result.stdout or ''}\n{result.stderr or ''}"
    if "already exists" in output.lower():
        print(f"App \"{name}\" already exists \n")
        return RegistrationResult.ALREADY_EXISTS

    print(f"Warning: could not create CodePush app \"{name}\" (exit code {result.returncode}): "
          f"{(result.stderr or result.stdout or '').strip()}\n")
    return RegistrationResult.FAILED


def parse_staging_key(raw: str, name: str = "") -> str:
    """Return the key of the second deployment in a `deployment ls --format json` listing."""
    try:
        deployments = json.loads(raw)
    except json.JSONDecodeError as e:
        raise CodePushError(f"Deployment listing for \"{name}\" is not valid JSON: {e}") from e

    if not isinstance(deployments, list) or len(deployments) < 2:
        raise CodePushError(
            f"Expected at least two deployments for \"{name}\", got: {raw.strip()[:200]}"
        )

    staging = deployments[1]
    if not isinstance(staging, dict) or not staging.get("key"):
        raise CodePushError(f"Second deployment of \"{name}\" has no key")

    # the service lists Production then Staging, but doesn't promise it
    deployment_name = staging.get("name")
    if deployment_name and deployment_name != STAGING:
        print(f"Warning: using key of deployment \"{deployment_name}\" for \"{name}\" "
              f"(expected \"{STAGING}\")")
    return staging["key"]


def get_staging_key(name: str) -> str:
    result = run_command(
        ["code-push", "deployment", "ls", name, "-k", "--format", "json"],
        echo_output=False,
    )
    return parse_staging_key(result.stdout, name)


def create_codepush_app(name: str, platform: str) -> str:
    """Register the app (if needed) and return its Staging deployment key."""
    register_app(name, platform)
    key = get_staging_key(name)
    print(f"Deployment key for {platform}: {key}")
    print(f"Use \"code-push release-react {name} {platform}\" command to release updates for {platform} \n")
    return key


def fetch_deployment_keys(app_name: str) -> DeploymentKeys:
    keys = {
        platform: create_codepush_app(codepush_app_name(app_name, platform), platform)
        for platform in PLATFORMS
    }
    return DeploymentKeys(**keys)
