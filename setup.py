from setuptools import setup, find_packages

setup(
    name="nwchem-docker",
    version="0.1.0",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    install_requires=[
        "ase>=3.22.1",
        "PyYAML>=6.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "nwchem-docker=nwchem_docker.cli:main",
        ],
    },
    author="Scientific Software Engineer",
    description="Run NWChem in Docker and convert input decks to Broombridge",
    long_description=open("README.md").read(),
    long_description_content_type="text/markdown",
    python_requires=">=3.9",
)
