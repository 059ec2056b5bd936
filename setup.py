from setuptools import setup, find_packages

setup(
    name="refactor_view",
    version="0.1.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "pyyaml",
        # Config file reload
        "watchdog>=3.0",
    ],
    extras_require={
        "test": [
            "pytest",
            "pytest-asyncio",
        ],
    },
    entry_points={
        "console_scripts": [
            "refactor-view=refactor_view.cli:main",
        ],
    },
    description="Review the edits of a rename or multi-file search as context windows.",
)
