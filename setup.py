from setuptools import find_packages, setup

package_name = "fiducial_slam"

setup(
    name=package_name,
    version="0.1.0",
    packages=find_packages(include=[package_name, package_name + ".*"]),
    data_files=[
        ("share/ament_index/resource_index/packages", ["resource/" + package_name]),
        ("share/" + package_name, ["package.xml"]),
        (
            "share/" + package_name + "/launch",
            [
                "launch/fiducial_slam.launch.py",
            ],
        ),
        (
            "share/" + package_name + "/config",
            [
                "config/fiducial_slam.yaml",
            ],
        ),
    ],
    install_requires=["setuptools", "numpy", "scipy", "PyYAML", "pydantic>=2"],
    extras_require={"test": ["pytest"]},
    zip_safe=True,
    maintainer="you",
    maintainer_email="you@example.com",
    description="Fiducial landmark map fusion and observer pose estimation (ROS 2)",
    license="BSD-3-Clause",
    tests_require=["pytest"],
    entry_points={
        "console_scripts": [
            "fiducial_slam_node = fiducial_slam.backend.slam_node:main",
        ],
    },
)
