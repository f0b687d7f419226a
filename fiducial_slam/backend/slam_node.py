"""
Fiducial SLAM node.

Subscribes to fiducial detections, runs one FiducialMap update per detection
batch, and publishes the map, landmark markers, the observer pose and
per-frame reports.

Topics:
    in:  <fiducial_transforms_topic>  fiducial_msgs/FiducialTransformArray
    out: /fiducial_map                fiducial_msgs/FiducialMapEntryArray
         /fiducials                   visualization_msgs/MarkerArray
         /fiducial_pose               geometry_msgs/PoseWithCovarianceStamped
         /fiducial_slam/report        std_msgs/String (FrameReport JSON)
         /fiducial_slam/status        std_msgs/String (periodic JSON)
         TF <map_frame> -> <pose_frame>
"""

import json
import time

import rclpy
from rclpy.clock import Clock, ClockType
from rclpy.node import Node
from rclpy.qos import QoSProfile, ReliabilityPolicy, HistoryPolicy, DurabilityPolicy

import tf2_ros
from fiducial_msgs.msg import FiducialMapEntryArray, FiducialTransformArray
from geometry_msgs.msg import PoseWithCovarianceStamped
from std_msgs.msg import String
from visualization_msgs.msg import MarkerArray

from fiducial_slam.backend.publish import RosMapPublisher
from fiducial_slam.config import declare_slam_params, validate_slam_params
from fiducial_slam.frontend.fiducial_io import observations_from_msg, stamp_to_sec
from fiducial_slam.mapping.fiducial_map import FiducialMap


class FiducialSlamNode(Node):
    """Landmark mapping and observer pose estimation from fiducial detections."""

    def __init__(self):
        super().__init__("fiducial_slam")

        declare_slam_params(self)
        self.params = validate_slam_params(self)

        self._init_ros()
        self._init_map()

        self.get_logger().info(
            f"Fiducial SLAM initialized: {len(self.map.landmarks)} fiducials, "
            f"map file {self.params.map_file}"
        )

    def _init_ros(self):
        """Initialize ROS interfaces."""
        qos_sensor = QoSProfile(
            reliability=ReliabilityPolicy.BEST_EFFORT,
            history=HistoryPolicy.KEEP_LAST,
            depth=10,
            durability=DurabilityPolicy.VOLATILE,
        )
        qos_reliable = QoSProfile(
            reliability=ReliabilityPolicy.RELIABLE,
            history=HistoryPolicy.KEEP_LAST,
            depth=100,
            durability=DurabilityPolicy.VOLATILE,
        )

        self.sub_fiducials = self.create_subscription(
            FiducialTransformArray,
            self.params.fiducial_transforms_topic,
            self.on_fiducials,
            qos_sensor,
        )
        self.get_logger().info(f"Fiducials: {self.params.fiducial_transforms_topic}")

        self.pub_map = self.create_publisher(FiducialMapEntryArray, "/fiducial_map", qos_reliable)
        self.pub_markers = self.create_publisher(MarkerArray, "/fiducials", qos_reliable)
        self.pub_pose = self.create_publisher(PoseWithCovarianceStamped, "/fiducial_pose", 10)
        self.pub_report = self.create_publisher(String, "/fiducial_slam/report", 10)
        self.pub_status = self.create_publisher(String, "/fiducial_slam/status", 10)

        self.tf_broadcaster = tf2_ros.TransformBroadcaster(self) if self.params.publish_tf else None

        # Trajectory export
        self.trajectory_file = None
        if self.params.trajectory_export_path:
            self.trajectory_file = open(self.params.trajectory_export_path, "w")
            self.trajectory_file.write("# timestamp x y z qx qy qz qw\n")

        # Tracking
        self.frame_count = 0
        self.last_n_observations = 0
        self.node_start_time = time.time()

        self._status_clock = Clock(clock_type=ClockType.SYSTEM_TIME)
        self.status_timer = self.create_timer(
            self.params.status_check_period_sec, self._publish_status, clock=self._status_clock
        )

    def _init_map(self):
        """Create the map, load it from storage and refresh every marker."""
        self.publisher = RosMapPublisher(
            node=self,
            map_frame=self.params.map_frame,
            pose_frame=self.params.pose_frame,
            marker_size=self.params.marker_size,
            pub_map=self.pub_map,
            pub_markers=self.pub_markers,
            pub_pose=self.pub_pose,
            pub_report=self.pub_report,
            tf_broadcaster=self.tf_broadcaster,
            trajectory_file=self.trajectory_file,
        )
        self.map = FiducialMap(
            map_file=self.params.map_file,
            publisher=self.publisher,
            logger=self.get_logger(),
            auto_init_frames=self.params.auto_init_frames,
            refresh_period=self.params.marker_refresh_period_sec,
            publish_rays=self.params.publish_rays,
        )

        if self.params.initial_map_file:
            self.map.load(self.params.initial_map_file)
        else:
            self.map.load()

        self.map.publish_markers()

    def on_fiducials(self, msg: FiducialTransformArray):
        """Run one map update per detection batch."""
        self.frame_count += 1
        observations = observations_from_msg(msg, logger=self.get_logger())
        self.last_n_observations = len(observations)

        try:
            report = self.map.update(observations, stamp_to_sec(msg.header.stamp))
        except Exception as e:
            # Log error and fail fast (no silent fallbacks)
            self.get_logger().error(f"Map update error on frame {self.frame_count}: {e}")
            import traceback
            self.get_logger().error(traceback.format_exc())
            raise

        if report.created:
            self.get_logger().info(
                f"Frame {report.frame}: new fiducials {report.created}, "
                f"map has {report.n_landmarks}"
            )

    def _publish_status(self):
        """Publish periodic status."""
        elapsed = time.time() - self.node_start_time

        status = {
            "elapsed_sec": elapsed,
            "frames": self.frame_count,
            "fiducials": len(self.map.landmarks),
            "anchor_id": self.map.anchor_fid,
            "phase": self.map.init_state.phase.value,
            "last_observations": self.last_n_observations,
            "pose_variance": self.map.pose_variance,
        }

        msg = String()
        msg.data = json.dumps(status)
        self.pub_status.publish(msg)

        self.get_logger().info(
            f"Fiducial SLAM status: frames={self.frame_count}, "
            f"fiducials={status['fiducials']}, phase={status['phase']}, "
            f"anchor={status['anchor_id']}"
        )

    def destroy_node(self):
        """Clean up."""
        if self.trajectory_file:
            self.trajectory_file.flush()
            self.trajectory_file.close()
            self.get_logger().info(f"Trajectory saved: {self.params.trajectory_export_path}")
        super().destroy_node()


def main():
    rclpy.init()
    node = FiducialSlamNode()

    try:
        rclpy.spin(node)
    except KeyboardInterrupt:
        pass
    finally:
        node.destroy_node()
        rclpy.shutdown()


if __name__ == "__main__":
    main()
