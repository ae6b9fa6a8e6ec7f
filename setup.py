from setuptools import setup, find_packages

setup(
    name="connect4-engine",
    version="0.1.0",
    packages=find_packages(include=["connect4_engine", "connect4_engine.*"]),
    python_requires=">=3.8",
    install_requires=[
        "numpy",
        "gymnasium",  # Environment interface for external agents
    ],
    extras_require={
        "test": ["pytest"],
    },
)
