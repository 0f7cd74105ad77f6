import re

from setuptools import setup

with open("forksigner/__init__.py") as init_file:
    __version__ = re.search(r'__version__ = "([^"]+)"', init_file.read()).group(1)

with open("README.rst") as readme:
    long_description = readme.read()

setup(
    name="fork-signer",
    version=__version__,
    description="Transaction signing for Bitcoin fork chains",
    long_description=long_description,
    url="https://github.com/fork-signer/fork-signer",
    license="MIT",
    keywords="bitcoin litecoin bitcoin-cash transaction signing utxo",
    install_requires=[
        "base58check>=1.0.2,<2.0",
        "coincurve>=13.0.0",
        "bech32>=1.2.0",
        "pydantic>=2.0,<3.0",
        "loguru>=0.7.0",
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
    packages=["forksigner"],
    python_requires=">=3.9",
    zip_safe=False,
)
