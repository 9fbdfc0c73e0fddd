#!/usr/bin/env python3
'''
Generate a CodePushified React Native app to reproduce issues or for testing.

Requirements:
  npm i -g react-native-cli
  npm i -g code-push-cli
  code-push register

Usage: codepush-demo [app_name] [react_native_version] [codepush_version]
'''
import argparse
import atexit
import os
import platform
import shutil
import signal
import sys
from pathlib import Path

from .codepush import codepush_app_name, fetch_deployment_keys
from .config import TOOL_NAME, config
from .errors import CodePushDemoError, LinkError
from .linker import cleanup_processes, link_codepush
from .scaffold import (
    generate_react_native_app,
    grant_access,
    install_codepush,
    optimize_for_debug,
    resolve_version,
    setup_assets,
)

REQUIRED_TOOLS = {
    "code-push": "npm i -g code-push-cli && code-push register",
    "react-native": "npm i -g react-native-cli",
    "npm": "install Node.js (https://nodejs.org)",
}


def signal_handler(signum, frame):
    print("\nReceived interrupt signal. Cleaning up...")
    cleanup_processes()
    os._exit(1)


def is_windows() -> bool:
    return platform.system() == "Windows"


def missing_tools():
    return [tool for tool in REQUIRED_TOOLS if shutil.which(tool) is None]


def build_parser():
    parser = argparse.ArgumentParser(
        description=f"{TOOL_NAME}: generate a CodePushified React Native app"
    )
    parser.add_argument("app_name", nargs='?', default=config.default_app_name,
                        help=f"Name of the app to generate (default: {config.default_app_name})")
    parser.add_argument("react_native_version", nargs='?',
                        help=f"e.g. {config.packages.react_native}@0.44.0 (default: latest)")
    parser.add_argument("codepush_version", nargs='?',
                        help=f"e.g. {config.packages.code_push}@5.0.0 (default: latest)")
    parser.add_argument("--fixtures", default=config.fixture_dir,
                        help="Directory with demo.js, index.*.js and images/ "
                             f"(default: ./{config.fixture_dir})")
    parser.add_argument("--link-timeout", type=float, default=config.link_timeout,
                        help="Seconds to wait for each `react-native link` prompt")
    parser.add_argument("--skip-debug-patch", action="store_true",
                        help="Don't patch native projects to load CodePush bundles in debug builds")
    return parser


def create_app(args, root: Path) -> int:
    app_name = args.app_name
    project_dir = root / app_name
    fixture_dir = (root / args.fixtures).resolve()

    if project_dir.exists():
        print(f"Folder with name \"{app_name}\" already exists! Please delete", file=sys.stderr)
        return 1

    missing = missing_tools()
    if missing:
        print("Missing required tools:", ", ".join(missing), file=sys.stderr)
        for tool in missing:
            print(f"  {tool}: {REQUIRED_TOOLS[tool]}", file=sys.stderr)
        return 1

    react_native_version = args.react_native_version or resolve_version(config.packages.react_native)
    codepush_version = args.codepush_version or resolve_version(config.packages.code_push)

    print(f"App name: {app_name}")
    print(f"React Native version: {react_native_version}")
    print(f"React Native Module for CodePush version: {codepush_version} \n")

    keys = fetch_deployment_keys(app_name)

    generate_react_native_app(app_name, react_native_version, cwd=root)
    install_codepush(codepush_version, project_dir)

    try:
        link_codepush(keys, cwd=project_dir, timeout=args.link_timeout)
    except LinkError as e:
        print(f"Linking failed: {e}", file=sys.stderr)
        return 1

    if not setup_assets(project_dir, fixture_dir, app_name):
        return 1

    if not is_windows():
        if not args.skip_debug_patch:
            optimize_for_debug(project_dir, app_name, react_native_version)
        grant_access(app_name, cwd=root)

    print(f"\nReact Native app \"{app_name}\" has been generated and CodePushified!")
    print(f"Release updates with \"code-push release-react {codepush_app_name(app_name, 'android')} android\" "
          f"and \"code-push release-react {codepush_app_name(app_name, 'ios')} ios\"")
    return 0


# -----------------------------------------------------------------------------
# CLI entrypoint
# -----------------------------------------------------------------------------
def main(argv=None):
    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)
    atexit.register(cleanup_processes)

    args = build_parser().parse_args(argv)
    try:
        return create_app(args, Path(os.getcwd()))
    except CodePushDemoError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\nInterrupted by user")
        cleanup_processes()
        return 130


if __name__ == "__main__":
    sys.exit(main())
