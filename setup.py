#!/usr/bin/env python
from setuptools import (
    find_packages,
    setup,
)

extras_require = {
    "dev": [
        "build>=0.9.0",
        "bumpversion>=0.5.3",
        "ipython",
        "pre-commit>=3.4.0",
        "tox>=4.0.0",
        "twine",
        "wheel",
    ],
    "mapo": [
        "eth-abi>=4.0.0",
        "eth-hash[pycryptodome]>=0.5.1",
        "eth-keys>=0.4.0",
        "eth-typing>=3.3.0",
        "eth-utils>=2.0.0",
        "py-ecc>=6.0.0",
        "rlp>=3.0.0",
        "trie>=2.0.0",
    ],
    "test": [
        "hypothesis>=6,<7",
        "pytest>=7.0.0",
        "pytest-cov>=4.0.0",
        "pytest-timeout>=2.0.0",
        "pytest-xdist>=3.0",
    ],
}


extras_require["dev"] = (
    extras_require["dev"] + extras_require["mapo"] + extras_require["test"]
)

install_requires = extras_require["mapo"]

with open("README.md") as readme_file:
    long_description = readme_file.read()

setup(
    name="py-mapo",
    # *IMPORTANT*: Don't manually change the version here. Use the 'bumpversion' utility.
    version="0.1.0-alpha.1",
    description="Light client and transfer verifier for the Map Istanbul BFT chain",
    long_description=long_description,
    long_description_content_type="text/markdown",
    author="Map Protocol bridge developers",
    url="https://github.com/mapprotocol",
    include_package_data=True,
    install_requires=install_requires,
    python_requires=">=3.8, <4",
    extras_require=extras_require,
    license="MIT",
    zip_safe=False,
    keywords="map bridge light-client istanbul bls",
    packages=find_packages(exclude=["tests", "tests.*"]),
    package_data={"mapo": ["py.typed"]},
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Natural Language :: English",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
    ],
)
