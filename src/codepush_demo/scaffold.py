#!/usr/bin/env python3
'''
React Native project scaffolding for CodePush demo apps.

Generates a plain React Native app, installs the CodePush module, swaps the
generated entry points for the demo fixtures and (outside Windows) patches the
native build so debug builds load their bundle from CodePush.
'''

import json
import os
import shutil
import subprocess
import sys
from pathlib import Path

from .config import config
from .shell import run_command

ENTRY_FILES = ("index.ios.js", "index.android.js")
FIXTURE_FILES = ("demo.js",) + ENTRY_FILES
FIXTURE_IMAGES = "images"

# react-native-xcode.sh moved from packager/ to scripts/ in this release
XCODE_SCRIPT_MOVED_IN = "0.46.0-rc.0"


def resolve_version(package: str) -> str:
    '''Ask the npm registry for the latest published version, as "package@x.y.z".'''
    result = run_command(["npm", "view", package, "version"])
    return f"{package}@{result.stdout.strip()}"


def generate_react_native_app(app_name: str, react_native_version: str, cwd=None):
    print("Installing React Native...")
    run_command(["react-native", "init", app_name, "--version", react_native_version], cwd=cwd)
    print("React Native has been installed \n")


def install_codepush(codepush_version: str, project_dir):
    print("Installing React Native Module for CodePush...")
    run_command(["npm", "i", "--save", codepush_version], cwd=project_dir)
    print("React Native Module for CodePush has been installed \n")


def replace_placeholder(path, placeholder: str, app_name: str):
    '''Replace every occurrence of `placeholder` in the file with `app_name`.'''
    path = Path(path)
    content = path.read_text(encoding="utf-8")
    path.write_text(content.replace(placeholder, app_name), encoding="utf-8")


def setup_assets(project_dir, fixture_dir, app_name: str,
                 placeholder: str = config.placeholder_name) -> bool:
    '''Replace the generated entry points with the demo fixtures.

    Returns False if the app name could not be written into demo.js; files
    copied before that point are left in place.
    '''
    project_dir = Path(project_dir)
    fixture_dir = Path(fixture_dir)

    for name in ENTRY_FILES:
        (project_dir / name).unlink()

    for name in FIXTURE_FILES:
        print(f"Copying {name} to {project_dir / name}")
        shutil.copyfile(fixture_dir / name, project_dir / name)

    print(f"Copying {FIXTURE_IMAGES}/ to {project_dir / FIXTURE_IMAGES}")
    shutil.copytree(fixture_dir / FIXTURE_IMAGES, project_dir / FIXTURE_IMAGES)

    try:
        replace_placeholder(project_dir / "demo.js", placeholder, app_name)
    except OSError as e:
        print(f"Could not set the app name in demo.js: {e}", file=sys.stderr)
        return False
    return True


def _version_of(selector: str) -> str:
    return selector.split("@", 1)[1] if "@" in selector else selector


def xcode_script_folder(react_native_version: str) -> str:
    '''Folder of react-native-xcode.sh inside node_modules/react-native.'''
    try:
        result = run_command(["npm", "view", "react-native", "versions", "--json"],
                             echo_output=False)
        versions = json.loads(result.stdout)
    except (subprocess.CalledProcessError, json.JSONDecodeError, OSError):
        return "scripts"

    current = _version_of(react_native_version)
    if current in versions and XCODE_SCRIPT_MOVED_IN in versions:
        if versions.index(current) < versions.index(XCODE_SCRIPT_MOVED_IN):
            return "packager"
    return "scripts"


def optimize_for_debug(project_dir, app_name: str, react_native_version: str):
    '''Make debug builds fetch their JS bundle from CodePush.'''
    print("Patching native projects to test CodePush in debug mode...")
    folder = xcode_script_folder(react_native_version)
    run_command(
        ["perl", "-i", "-p0e",
         "s/#ifdef DEBUG.*?#endif/jsCodeLocation = [CodePush bundleURL];/s",
         os.path.join("ios", app_name, "AppDelegate.m")],
        cwd=project_dir,
    )
    run_command(
        ["sed", "-i.bak", "17,20d",
         os.path.join("node_modules", "react-native", folder, "react-native-xcode.sh")],
        cwd=project_dir,
    )
    run_command(
        ["sed", "-i.bak", 's/targetName.toLowerCase().contains("release")$/true/',
         os.path.join("node_modules", "react-native", "react.gradle")],
        cwd=project_dir,
    )


def current_user() -> str:
    '''Name of the effective user, as `whoami` reports it.'''
    import pwd
    return pwd.getpwuid(os.geteuid()).pw_name


def grant_access(folder_path, cwd=None):
    user = current_user()
    run_command(["chown", "-R", user, str(folder_path)], cwd=cwd)
    run_command(["chmod", "-R", "755", str(folder_path)], cwd=cwd)
