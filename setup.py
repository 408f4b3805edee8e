from setuptools import find_packages, setup

setup(
    name="gcs-resource",
    version="0.1.0",
    description="Concourse-style check/in/out resource for Google Cloud Storage",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    python_requires=">=3.10",
    install_requires=[
        "google-cloud-storage",
        "google-auth",
        "rich",
        "PyYAML",
        "platformdirs",
    ],
    extras_require={
        "test": [
            "pytest<9.1",
            "pytest-mock",
        ],
    },
    entry_points={
        "console_scripts": [
            "gcs-resource=gcs_resource.cli:main",
            "gcs-resource-check=gcs_resource.cli:check_main",
            "gcs-resource-in=gcs_resource.cli:in_main",
            "gcs-resource-out=gcs_resource.cli:out_main",
        ],
    },
)
