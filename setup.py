"""Setup script for development installation."""

from setuptools import find_packages, setup

setup(
    name="activity_timer",
    version="0.1.0",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    python_requires=">=3.8",
    install_requires=[
        "PyQt6>=6.4.0",
        "pandas>=1.3.0",
        "cryptography>=3.4.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0.0",
            "pytest-qt>=4.0.0",
            "pytest-benchmark>=4.0.0",
            "pytest-cov>=3.0.0",
        ],
    },
    entry_points={
        "gui_scripts": [
            "activity-timer=activity_timer.main:main",
        ],
    },
)
