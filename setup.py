"""Setup script for blobpub."""

from pathlib import Path

from setuptools import find_packages, setup


def read_version():
    """Read __version__ without importing the package."""
    init = Path(__file__).parent / "blobpub" / "__init__.py"
    for line in init.read_text().splitlines():
        if line.startswith("__version__"):
            return line.split("=", 1)[1].strip().strip("\"'")
    raise RuntimeError("Unable to find __version__ in blobpub/__init__.py")


setup(
    name="blobpub",
    version=read_version(),
    description="Publish release artifacts to S3-compatible and other object storage buckets",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.10",
    install_requires=[
        "click>=8.1",
        "pydantic>=2.0",
        "pydantic-settings>=2.0",
        "dependency-injector>=4.41",
        "boto3>=1.28",
        "botocore>=1.31",
        'tomli>=2.0; python_version < "3.11"',
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "blobpub=blobpub.__main__:main",
        ],
    },
)
