from setuptools import setup, find_packages

with open("README.md") as f:
    readme = f.read()

with open("requirements.txt") as f:
    requirements = [line for line in f.read().splitlines() if line and not line.startswith("-")]


setup(
    name="cf-drain",
    version="0.1.0",
    description="Create syslog drains for Cloud Foundry apps and services",
    long_description=readme,
    long_description_content_type="text/markdown",
    python_requires=">=3.8",
    install_requires=requirements,
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": ["cf-drain=cf_drain.__main__:main"],
    },
    packages=find_packages(exclude=["tests"]),
)
