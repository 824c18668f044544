from setuptools import setup, find_packages


with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setup(
    name="routegraph",
    version="0.1.0",
    author="RouteGraph developers",
    description="Optimal delivery routing through mandatory stops on weighted graphs.",
    long_description=long_description,
    long_description_content_type="text/markdown",
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
    packages=find_packages(exclude=("tests", "tests.*")),
    package_data={
        "routegraph.schemas": ["*.json"],
        "routegraph.data": ["*.yaml"],
    },
    include_package_data=True,
    python_requires=">=3.10",
    install_requires=["networkx", "pyyaml", "jsonschema"],
    extras_require={"test": ["pytest"]},
    entry_points={"console_scripts": ["routegraph=routegraph.cli:main"]},
)
