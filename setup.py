"""Setup configuration for prstats"""

from setuptools import setup, find_packages

setup(
    name="github-pr-stats",
    version="0.1.0",
    description=(
        "CLI tool for GitHub pull request statistics: per-contributor PR, "
        "review and response-time metrics."
    ),
    author="GitHub PR Stats Contributors",
    author_email="",
    python_requires=">=3.10",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    install_requires=[
        "requests>=2.28.0",
        "openpyxl>=3.1.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0",
            "black>=22.0",
            "flake8>=4.0",
            "mypy>=0.950",
        ],
    },
    entry_points={
        "console_scripts": [
            "github-pr-stats=prstats.main:main",
            "github-pr-comments=prstats.extract_comments:main",
        ],
    },
)
