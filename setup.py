from setuptools import setup, find_packages

setup(
    name="nfl-matchup-simulator",
    version="0.1.0",
    description="Monte Carlo head-to-head simulation engine for NFL matchups",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "numpy>=1.22.4",
        "pandas>=1.5.3",
        "scipy>=1.10.0",
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
    python_requires=">=3.8",
    entry_points={
        "console_scripts": [
            "nfl-matchup=src.main:main",
        ],
    },
)
