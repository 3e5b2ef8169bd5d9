import setuptools

with open("README.md", "r") as fh:
    long_description = fh.read()

setuptools.setup(
    name="pyjjm",
    version="0.1.0",
    author="pyjjm developers",
    description="python library for reading, writing and comparing JJM stock assessment models",
    long_description=long_description,
    long_description_content_type="text/markdown",
    package_dir={"": "src"},
    packages=setuptools.find_packages(where="src"),
    package_data={"pyjjm.templates": ["jjm/*.j2"]},
    install_requires=[
        "numpy",
        "pandas",
        "jinja2",
    ],
    extras_require={
        "test": [
            "pytest",
            "hypothesis",
        ],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
    python_requires=">=3.10",
)
