import pathlib

import setuptools

here = pathlib.Path(__file__).parent.resolve()

long_description = (here / "README.md").read_text(encoding="utf-8")

setuptools.setup(
    name="ethereum-envelope",
    version="0.1.0",
    description="Ethereum transaction envelope codec: RLP, EIP-2718 typed transactions and signing",
    long_description=long_description,
    long_description_content_type="text/markdown",
    license="CC0-1.0",
    python_requires=">=3.10",
    package_dir={"": "src"},
    packages=setuptools.find_packages(where="src", include=["ethereum_envelope*"]),
    package_data={"ethereum_envelope": ["logger.cfg", "py.typed"]},
    install_requires=[
        "ethereum-types>=0.2.3,<0.3",
        "pycryptodome>=3.17,<4",
        "coincurve>=18",
        "pydantic>=2.0,<3",
        "PyYAML>=6.0",
    ],
    extras_require={
        "test": [
            "pytest>=7",
            "ethereum-rlp>=0.1.1,<0.2",
        ],
    },
)
