"""
Setup script for the Offboarding Engine.
"""

from setuptools import find_packages, setup

with open("requirements.txt") as f:
    requirements = [line for line in f.read().splitlines() if line and not line.startswith("#")]

with open("README.md", encoding="utf-8") as fh:
    long_description = fh.read()

setup(
    name="offboarding-engine",
    version="1.0.0",
    author="Offboarding Engine Team",
    author_email="team@example.com",
    description="Employee offboarding workflow engine with per-step completion gates",
    long_description=long_description,
    long_description_content_type="text/markdown",
    url="https://github.com/yourusername/offboarding-engine",
    packages=find_packages(exclude=["tests", "tests.*"]),
    package_data={
        "offboarding_engine.engine": ["*.yaml"],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Information Technology",
        "Topic :: Office/Business",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
    python_requires=">=3.9",
    install_requires=requirements,
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-cov>=4.0.0",
            "httpx>=0.24.0",
            "black>=23.0.0",
            "isort>=5.12.0",
            "flake8>=6.0.0",
            "mypy>=1.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "offboardctl=offboarding_engine.cli.offboardctl:main",
        ],
    },
)
