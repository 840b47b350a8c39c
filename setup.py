"""Setup script for ndjson_codec package."""

from pathlib import Path

from setuptools import find_packages, setup

# Read the contents of README file
this_directory = Path(__file__).parent
long_description = (this_directory / "README.md").read_text()

setup(
    name="ndjson_codec",
    version="1.0.0",
    description="A streaming NDJSON encoder/decoder with per-record error reporting and tabular framing",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["tests", "tests.*"]),
    classifiers=[
        "Development Status :: 5 - Production/Stable",
        "Intended Audience :: Developers",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Software Development :: Libraries :: Python Modules",
        "Topic :: Text Processing",
        "Topic :: Utilities",
        "Typing :: Typed",
    ],
    python_requires=">=3.8",
    install_requires=[
        "orjson>=3.8.0",
        "tqdm>=4.64.0",
        "filelock>=3.12.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-cov>=4.0.0",
            "mypy>=1.0.0",
            "black>=22.0.0",
            "isort>=5.10.0",
            "flake8-pyproject>=1.2.3",
            "bandit>=1.7.0",
            "pre-commit>=3.0.0",
        ],
    },
    include_package_data=True,
    package_data={
        "ndjson_codec": ["py.typed"],
    },
    keywords="ndjson jsonl json streaming encoder decoder tabular",
)
