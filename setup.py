from setuptools import setup, find_packages


setup(
    name="embedfs",
    version="0.1",
    packages=find_packages(include=["embedfs", "embedfs.*"]),
    description="Embed static files into a generated Python module served as a read-only virtual filesystem.",
    install_requires=[
        "zstandard>=0.22.0",
    ],
    entry_points={
        "console_scripts": [
            "embedfs=embedfs.cli:main",
        ]
    },
)
