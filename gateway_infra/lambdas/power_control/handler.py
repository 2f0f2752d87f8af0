"""
Lambda function to stop and start the gateway instance on a schedule.
Invoked by EventBridge rules with {"action": "stop"} or {"action": "start"}.
"""
import json
import os
import logging
from typing import Dict, Any
import boto3
from botocore.exceptions import ClientError

logger = logging.getLogger()
logger.setLevel(os.environ.get("LOG_LEVEL", "INFO"))

ec2_client = boto3.client("ec2")

INSTANCE_ID = os.environ.get("INSTANCE_ID", "")


def lambda_handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """
    Stop or start the gateway instance.

    Args:
        event: EventBridge rule input
        context: Lambda context object

    Returns:
        Response with status and the resulting instance state
    """
    logger.info(f"Received event: {json.dumps(event)}")

    action = event.get("action", "")
    if not INSTANCE_ID:
        return create_response(500, "INSTANCE_ID is not configured")

    try:
        if action == "stop":
            return stop_instance()
        elif action == "start":
            return start_instance()
        else:
            return create_response(400, f"Unknown action: {action}")

    except ClientError as e:
        logger.error(f"AWS Client Error: {str(e)}")
        return create_response(500, f"AWS Error: {e.response['Error']['Message']}")


def stop_instance() -> Dict[str, Any]:
    """Stop the instance; the EBS volume and config survive."""
    response = ec2_client.stop_instances(InstanceIds=[INSTANCE_ID])
    state = response["StoppingInstances"][0]["CurrentState"]["Name"]
    logger.info(f"Stopping {INSTANCE_ID}: {state}")
    return create_response(200, {
        "instanceId": INSTANCE_ID,
        "action": "stop",
        "state": state
    })


def start_instance() -> Dict[str, Any]:
    """Start the instance; the gateway service starts via systemd."""
    response = ec2_client.start_instances(InstanceIds=[INSTANCE_ID])
    state = response["StartingInstances"][0]["CurrentState"]["Name"]
    logger.info(f"Starting {INSTANCE_ID}: {state}")
    return create_response(200, {
        "instanceId": INSTANCE_ID,
        "action": "start",
        "state": state
    })


def create_response(status_code: int, body: Any) -> Dict[str, Any]:
    """Create a standardized response."""
    return {
        "statusCode": status_code,
        "body": json.dumps(body, default=str)
    }
