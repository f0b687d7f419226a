"""
Backend package for fiducial SLAM.

ROS 2 node and publishing. Importing this package requires a sourced ROS 2
environment (rclpy, tf2_ros, fiducial_msgs, visualization_msgs).
"""
