"""
Fiducial SLAM Launch File.

Launches the fiducial SLAM node with the packaged base configuration.
Detections are expected on /fiducial_transforms (e.g. from aruco_detect).
"""

import os

from ament_index_python.packages import get_package_share_directory
from launch import LaunchDescription
from launch.actions import DeclareLaunchArgument
from launch.substitutions import LaunchConfiguration
from launch_ros.actions import Node


def generate_launch_description():
    """Generate launch description for fiducial SLAM."""
    config = os.path.join(
        get_package_share_directory("fiducial_slam"), "config", "fiducial_slam.yaml"
    )

    map_file_arg = DeclareLaunchArgument(
        "map_file",
        default_value=os.path.expanduser("~/.ros/slam/map.txt"),
        description="Path of the persisted landmark map",
    )

    initial_map_file_arg = DeclareLaunchArgument(
        "initial_map_file",
        default_value="",
        description="Optional map to start from instead of map_file",
    )

    trajectory_path_arg = DeclareLaunchArgument(
        "trajectory_export_path",
        default_value="",
        description="Path to export the observer trajectory in TUM format (empty = off)",
    )

    slam_node = Node(
        package="fiducial_slam",
        executable="fiducial_slam_node",
        name="fiducial_slam",
        output="screen",
        parameters=[
            config,
            {
                "map_file": LaunchConfiguration("map_file"),
                "initial_map_file": LaunchConfiguration("initial_map_file"),
                "trajectory_export_path": LaunchConfiguration("trajectory_export_path"),
            },
        ],
    )

    return LaunchDescription([
        map_file_arg,
        initial_map_file_arg,
        trajectory_path_arg,
        slam_node,
    ])
