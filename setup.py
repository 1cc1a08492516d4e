from setuptools import setup, find_packages

setup(
    name="xarm_servo",
    version="0.1.0",
    description="Hiwonder/LewanSoul xArm and bus servo control library for Python",
    long_description=(
        open("README.md").read() if __import__("os").path.exists("README.md") else ""
    ),
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["tests", "tests.*"]),
    include_package_data=True,
    install_requires=[
        "pyserial",
        "pyusb>=1.2.0",
    ],
    extras_require={
        "test": ["pytest"],
    },
    tests_require=["pytest"],
    license="MIT",
    classifiers=[
        "Programming Language :: Python :: 3",
        "Operating System :: OS Independent",
        "Topic :: Software Development :: Libraries :: Python Modules",
        "Intended Audience :: Developers",
        "Intended Audience :: Science/Research",
    ],
    python_requires=">=3.8",
)
