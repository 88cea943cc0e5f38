#!/usr/bin/env python3
"""Build Lambda deployment packages."""

import os
import shutil
import sys
import zipfile
from pathlib import Path

LAMBDAS = ["lambda_telemetry", "lambda_analyze", "lambda_import", "lambda_health"]
SHARED_PACKAGE = "pet_health"

# boto3/botocore ship with the Lambda Python runtime and are not bundled
PACKAGES_TO_COPY = [
    "pydantic",
    "pydantic_core",
    "pydantic_settings",
    "dotenv",
    "typing_extensions",
    "typing_inspection",
    "annotated_types",
    "requests",
    "urllib3",
    "charset_normalizer",
    "idna",
    "certifi",
    "pandas",
    "numpy",
    "pytz",
    "dateutil",
    "tzdata",
    "six",
    "openai",
    "httpx",
    "httpcore",
    "h11",
    "anyio",
    "sniffio",
    "distro",
    "jiter",
    "tqdm",
]


def copy_site_packages(site_packages: Path, target: Path) -> None:
    """Copy the runtime dependencies (and their dist-info) into ``target``."""
    for pkg in PACKAGES_TO_COPY:
        pkg_path = site_packages / pkg
        if pkg_path.is_dir():
            shutil.copytree(pkg_path, target / pkg, dirs_exist_ok=True)
        elif pkg_path.with_suffix(".py").exists():
            shutil.copy2(pkg_path.with_suffix(".py"), target / f"{pkg}.py")

        for dist_info in site_packages.glob(f"{pkg}*.dist-info"):
            shutil.copytree(dist_info, target / dist_info.name, dirs_exist_ok=True)

    # Compiled wheels keep their shared libraries next to site-packages
    for libs in ("numpy.libs", "pandas.libs"):
        libs_path = site_packages / libs
        if libs_path.exists():
            shutil.copytree(libs_path, target / libs, dirs_exist_ok=True)


def build_lambda_package(lambda_name: str, site_packages_dir: str, output_dir: str) -> Path:
    """Zip one handler with the shared package and its dependencies.

    Args:
        lambda_name: Handler directory (e.g. 'lambda_telemetry').
        site_packages_dir: Directory containing installed Python packages.
        output_dir: Directory to write the ZIP file to.

    Returns:
        Path of the written ZIP file.
    """
    print(f"Building {lambda_name}...")

    staging = Path(output_dir) / f"{lambda_name}_staging"
    staging.mkdir(parents=True, exist_ok=True)

    try:
        shutil.copy2(Path(lambda_name) / "handler.py", staging / "handler.py")
        shutil.copytree(
            SHARED_PACKAGE,
            staging / SHARED_PACKAGE,
            dirs_exist_ok=True,
            ignore=shutil.ignore_patterns("__pycache__", "*.pyc"),
        )

        site_packages = Path(site_packages_dir)
        if site_packages.exists():
            copy_site_packages(site_packages, staging)
        else:
            print(f"  ! {site_packages} not found, packaging without dependencies")

        zip_path = Path(output_dir) / f"{lambda_name}.zip"
        with zipfile.ZipFile(zip_path, "w", zipfile.ZIP_DEFLATED) as zipf:
            for root, _dirs, files in os.walk(staging):
                for file in files:
                    file_path = Path(root) / file
                    zipf.write(file_path, file_path.relative_to(staging))

        print(f"✓ Built {zip_path}")
        return zip_path

    finally:
        if staging.exists():
            shutil.rmtree(staging)


def main():
    site_packages = sys.argv[1] if len(sys.argv) > 1 else "packages"
    output_dir = "dist"
    Path(output_dir).mkdir(parents=True, exist_ok=True)

    for lambda_name in LAMBDAS:
        build_lambda_package(lambda_name, site_packages, output_dir)

    print(f"\n✓ All Lambda packages built successfully in {output_dir}/")


if __name__ == "__main__":
    main()
