# setup.py
from setuptools import setup

setup(
    name="RedstoneGrid",
    version="0.1.0",
    description="Dense redstone block grid with the compact .mcrs file format",
    python_requires=">=3.8",
    packages=["circuit", "common", "engine", "persistence"],
    extras_require={
        "test": ["pytest"],
    },
)
