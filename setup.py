"""
Setup script for tiny-wrs.
"""

from setuptools import setup, find_packages

setup(
    name="tiny-wrs",
    version="0.1.0",
    packages=find_packages(include=["tiny_wrs", "tiny_wrs.*"]),
    package_data={"tiny_wrs": ["py.typed"]},
    python_requires=">=3.9",
)
