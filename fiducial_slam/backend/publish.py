"""
ROS 2 publishing for the fiducial map.

Implements the MapPublisher boundary: map entries, landmark markers, observer
rays, the fused observer pose (TF, pose topic, trajectory export) and frame
reports.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING, List, Mapping, Optional, TextIO

import numpy as np
from fiducial_msgs.msg import FiducialMapEntry, FiducialMapEntryArray
from geometry_msgs.msg import Point, PoseWithCovarianceStamped, TransformStamped
from std_msgs.msg import String
from visualization_msgs.msg import Marker, MarkerArray

from fiducial_slam import constants
from fiducial_slam.common.frame_report import FrameReport
from fiducial_slam.common.geometry import Transform

if TYPE_CHECKING:
    from fiducial_slam.backend.slam_node import FiducialSlamNode
    from fiducial_slam.mapping.landmark import Landmark


def _point(p: np.ndarray) -> Point:
    out = Point()
    out.x = float(p[0])
    out.y = float(p[1])
    out.z = float(p[2])
    return out


class RosMapPublisher:
    """MapPublisher backed by ROS 2 publishers of a FiducialSlamNode."""

    def __init__(
        self,
        node: "FiducialSlamNode",
        map_frame: str,
        pose_frame: str,
        marker_size: float,
        pub_map,
        pub_markers,
        pub_pose,
        pub_report,
        tf_broadcaster=None,
        trajectory_file: Optional[TextIO] = None,
    ):
        self.node = node
        self.map_frame = map_frame
        self.pose_frame = pose_frame
        self.marker_size = float(marker_size)
        self.pub_map = pub_map
        self.pub_markers = pub_markers
        self.pub_pose = pub_pose
        self.pub_report = pub_report
        self.tf_broadcaster = tf_broadcaster
        self.trajectory_file = trajectory_file
        self._next_ray_id = constants.MARKER_ID_RAY_START

    def _now(self):
        return self.node.get_clock().now().to_msg()

    def _marker(self, ns: str, marker_id: int, marker_type: int) -> Marker:
        m = Marker()
        m.header.stamp = self._now()
        m.header.frame_id = self.map_frame
        m.ns = ns
        m.id = int(marker_id)
        m.type = marker_type
        m.action = Marker.ADD
        m.pose.orientation.w = 1.0
        return m

    # -------------------------------------------------------------------------
    # MapPublisher
    # -------------------------------------------------------------------------

    def publish_map(self, landmarks: Mapping[int, "Landmark"]) -> None:
        """Publish every landmark pose as a FiducialMapEntryArray."""
        msg = FiducialMapEntryArray()
        for fid in sorted(landmarks):
            lm = landmarks[fid]
            entry = FiducialMapEntry()
            entry.fiducial_id = int(fid)
            x, y, z = lm.pose.translation
            entry.x, entry.y, entry.z = float(x), float(y), float(z)
            entry.rx, entry.ry, entry.rz = lm.pose.rpy()
            msg.fiducials.append(entry)
        self.pub_map.publish(msg)

    def publish_landmark(self, landmark: "Landmark", landmarks: Mapping[int, "Landmark"]) -> None:
        """
        Publish the visualization of one landmark.

        Flattened cube at the landmark pose, a cylinder scaled by the standard
        deviation, a text label, and lines to linked landmarks (each link is
        drawn once, from its smaller id).
        """
        ma = MarkerArray()
        t = landmark.pose.translation
        qx, qy, qz, qw = landmark.pose.quat()

        cube = self._marker("fiducial", landmark.fid, Marker.CUBE)
        cube.pose.position = _point(t)
        cube.pose.orientation.x = qx
        cube.pose.orientation.y = qy
        cube.pose.orientation.z = qz
        cube.pose.orientation.w = qw
        cube.scale.x = self.marker_size
        cube.scale.y = self.marker_size
        cube.scale.z = constants.MARKER_THICKNESS
        cube.color.g = 1.0
        cube.color.a = 1.0
        ma.markers.append(cube)

        sigma = self._marker("sigma", landmark.fid + constants.MARKER_ID_OFFSET_SIGMA, Marker.CYLINDER)
        sigma.pose.position = _point(t)
        sigma.pose.position.z += constants.MARKER_THICKNESS / 2.0 + 0.05
        std = math.sqrt(landmark.variance)
        sigma.scale.x = std
        sigma.scale.y = std
        sigma.scale.z = constants.MARKER_THICKNESS
        sigma.color.b = 1.0
        sigma.color.a = 0.8
        ma.markers.append(sigma)

        text = self._marker("text", landmark.fid + constants.MARKER_ID_OFFSET_TEXT, Marker.TEXT_VIEW_FACING)
        text.pose.position = _point(t)
        text.pose.position.z += constants.MARKER_THICKNESS / 2.0 + 0.1
        text.scale.x = constants.TEXT_HEIGHT
        text.scale.y = constants.TEXT_HEIGHT
        text.scale.z = constants.TEXT_HEIGHT
        text.color.r = 1.0
        text.color.g = 1.0
        text.color.b = 1.0
        text.color.a = 1.0
        text.text = str(landmark.fid)
        ma.markers.append(text)

        links = self._marker("links", landmark.fid + constants.MARKER_ID_OFFSET_LINKS, Marker.LINE_LIST)
        links.scale.x = constants.LINK_LINE_WIDTH
        links.color.b = 1.0
        links.color.a = 1.0
        points: List[Point] = []
        for other in sorted(landmark.links):
            if landmark.fid < other and other in landmarks:
                points.append(_point(t))
                points.append(_point(landmarks[other].pose.translation))
        links.points = points
        ma.markers.append(links)

        self.pub_markers.publish(ma)

    def publish_ray(self, start: np.ndarray, end: np.ndarray) -> None:
        """Publish a line from a landmark to the observer estimate it produced."""
        line = self._marker("lines", self._next_ray_id, Marker.LINE_LIST)
        self._next_ray_id += 1
        line.scale.x = constants.RAY_LINE_WIDTH
        line.color.r = 1.0
        line.color.a = 1.0
        line.points = [_point(start), _point(end)]
        ma = MarkerArray()
        ma.markers.append(line)
        self.pub_markers.publish(ma)

    def publish_pose(self, pose: Transform, variance: float, stamp: float) -> None:
        """Broadcast the observer transform and publish it with its variance."""
        x, y, z = (float(v) for v in pose.translation)
        qx, qy, qz, qw = pose.quat()

        out = PoseWithCovarianceStamped()
        out.header.stamp = self._now()
        out.header.frame_id = self.map_frame
        out.pose.pose.position.x = x
        out.pose.pose.position.y = y
        out.pose.pose.position.z = z
        out.pose.pose.orientation.x = qx
        out.pose.pose.orientation.y = qy
        out.pose.pose.orientation.z = qz
        out.pose.pose.orientation.w = qw
        out.pose.covariance = (np.eye(6) * float(variance)).reshape(-1).tolist()
        self.pub_pose.publish(out)

        if self.tf_broadcaster is not None:
            tf_msg = TransformStamped()
            tf_msg.header = out.header
            tf_msg.child_frame_id = self.pose_frame
            tf_msg.transform.translation.x = x
            tf_msg.transform.translation.y = y
            tf_msg.transform.translation.z = z
            tf_msg.transform.rotation = out.pose.pose.orientation
            self.tf_broadcaster.sendTransform(tf_msg)

        if self.trajectory_file:
            self.trajectory_file.write(
                f"{stamp:.9f} {x:.6f} {y:.6f} {z:.6f} "
                f"{qx:.6f} {qy:.6f} {qz:.6f} {qw:.6f}\n"
            )
            self.trajectory_file.flush()

    def publish_report(self, report: FrameReport) -> None:
        """Publish a FrameReport as JSON."""
        try:
            report.validate()
        except ValueError as exc:
            self.node.get_logger().error(f"FrameReport validation failed: {exc}")
            raise
        msg = String()
        msg.data = report.to_json()
        self.pub_report.publish(msg)
