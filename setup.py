""" hdcore build script for setuptools.

"""

from setuptools import find_packages, setup  # type: ignore

import hdcore

with open("README.md", "r", encoding="ascii") as file_:
    longdescription = file_.read()

setup(
    name=hdcore.name,
    version=hdcore.__version__,
    license=hdcore.__license__,
    author=hdcore.__author__,
    author_email=hdcore.__author_email__,
    description="Elliptic curve signatures and hierarchical deterministic keys",
    long_description=longdescription,
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["tests", "tests.*"]),
    include_package_data=True,
    package_data={"hdcore.ecc": ["data/*.json"]},
    install_requires=["base58", "dataclasses-json", "pycryptodome"],
    extras_require={"test": ["pytest"]},
    keywords=(
        "elliptic-curves finite-fields ecdsa schnorr RFC-6979 "
        "bip32 slip10 bip340 wnaf"
    ),
    python_requires=">=3.8",
    classifiers=[
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Natural Language :: English",
        "Operating System :: OS Independent",
        "Topic :: Security :: Cryptography",
        "Topic :: Software Development :: Libraries :: Python Modules",
    ],
)
