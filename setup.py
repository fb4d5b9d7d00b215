from setuptools import setup

setup(
    name="jsconsumer",
    version="0.1.0",
    description="JetStream consumer configuration model and wire codec",
    license="Apache 2 License",
    python_requires=">=3.8",
    extras_require={
        "orjson": ["orjson"],
        "test": ["pytest", "orjson"],
    },
    packages=["jsconsumer"],
    package_data={"jsconsumer": ["py.typed"]},
    zip_safe=True,
)
