from setuptools import setup, find_packages

# -------------------------------------------------
# Dependencies
# -------------------------------------------------

install_requires = [
    "numpy>=1.21",
    "pyyaml>=6.0",
    "psutil>=5.9",
]

extras_require = {
    "test": [
        "pytest>=7.0",
    ],
}

# -------------------------------------------------
# Setup
# -------------------------------------------------

setup(
    name="repeat-stitcher",
    version="1.0.0",
    description="Dynamic programming stitcher for fragmented repeat masker annotations",
    python_requires=">=3.8",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    package_data={"repeat_stitcher.config": ["default_config.yaml"]},
    include_package_data=True,
    install_requires=install_requires,
    extras_require=extras_require,
    entry_points={
        "console_scripts": [
            "repeat-stitch=repeat_stitcher.scripts.run_pipeline:main",
        ],
    },
    zip_safe=False,
)
