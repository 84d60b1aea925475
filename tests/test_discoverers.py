"""
Tests for the AWS discoverers, using mocked boto3 sessions.
"""

import json
from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest

from core.errors import DiscoveryError
from ontology import (
    Relationship, related, resource_map, VirtualMachine, BlockStorage, NetworkInterface, VirtualNetwork,
    ObjectStorage, ObjectStorageService, Account
)
from services import EC2Discoverer, S3Discoverer, IAMDiscoverer, get_registry
from tests.conftest import ACCOUNT_ID, REGION, client_error, paginated

LAUNCH_TIME = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)


def ec2_arn(resource: str) -> str:
    return f"arn:aws:ec2:{REGION}:{ACCOUNT_ID}:{resource}"


INSTANCE = {
    "InstanceId": "i-0abc",
    "LaunchTime": LAUNCH_TIME,
    "VpcId": "vpc-1",
    "Tags": [{"Key": "Name", "Value": "web"}, {"Key": "env", "Value": "prod"}],
    "Monitoring": {"State": "enabled"},
    "NetworkInterfaces": [{"NetworkInterfaceId": "eni-1"}],
    "BlockDeviceMappings": [
        {"DeviceName": "/dev/xvda", "Ebs": {"VolumeId": "vol-1"}},
        {"DeviceName": "/dev/sdb", "VirtualName": "ephemeral0"},
    ],
}


class TestEC2Discoverer:

    @pytest.fixture
    def discoverer(self, config, session, clients):
        clients["ec2"].get_paginator.side_effect = paginated({
            "describe_instances": [{"Reservations": [{"Instances": [INSTANCE]}]}],
            "describe_volumes": [{"Volumes": [
                {"VolumeId": "vol-1", "CreateTime": LAUNCH_TIME, "Encrypted": True, "KmsKeyId": "key-customer"},
                {"VolumeId": "vol-2", "Encrypted": False},
            ]}],
            "describe_network_interfaces": [{"NetworkInterfaces": [{
                "NetworkInterfaceId": "eni-1",
                "VpcId": "vpc-1",
                "Description": "primary",
                "PrivateIpAddresses": [{"PrivateIpAddress": "10.0.0.5"}],
                "Association": {"PublicIp": "52.1.2.3"},
                "TagSet": [],
            }]}],
            "describe_vpcs": [{"Vpcs": [{
                "VpcId": "vpc-1",
                "OwnerId": ACCOUNT_ID,
                "CidrBlockAssociationSet": [{"CidrBlock": "10.0.0.0/16"}],
            }]}],
        })
        clients["kms"].describe_key.return_value = {"KeyMetadata": {"KeyManager": "CUSTOMER"}}
        return EC2Discoverer(config, session)

    def test_supported_types(self, discoverer):
        assert discoverer.get_supported_resource_types() == [VirtualMachine, BlockStorage, NetworkInterface, VirtualNetwork]

    def test_lists_all_resources(self, discoverer):
        resources = discoverer.list_resources()

        assert [type(r).__name__ for r in resources] == [
            "VirtualMachine", "BlockStorage", "BlockStorage", "NetworkInterface", "VirtualNetwork"
        ]
        assert discoverer.stats["resources_found"] == 5

    def test_virtual_machine(self, discoverer):
        vm = discoverer.list_resources()[0]

        assert vm.id == ec2_arn("instance/i-0abc")
        assert vm.name == "web"
        assert vm.labels == {"Name": "web", "env": "prod"}
        assert vm.get_creation_time() == LAUNCH_TIME
        assert vm.resource_logging.monitoring_log_data_enabled
        assert json.loads(vm.get_raw())["ec2.Instance"][0]["InstanceId"] == "i-0abc"

    def test_virtual_machine_relationships(self, discoverer):
        vm = discoverer.list_resources()[0]

        assert related(vm) == [
            Relationship("parent", ec2_arn("vpc/vpc-1")),
            Relationship("network_interface", ec2_arn("network-interface/eni-1")),
            Relationship("block_storage", ec2_arn("volume/vol-1")),
        ]

    def test_virtual_machine_projection(self, discoverer):
        props = resource_map(discoverer.list_resources()[0])

        assert props["creationTime"] == "2024-03-01T12:00:00Z"
        assert props["geoLocation"] == {"region": REGION}
        assert props["bootLogging"]["enabled"] is False

    def test_volume_encryption(self, discoverer):
        _, encrypted, plain = discoverer.list_resources()[:3]

        assert encrypted.at_rest_encryption.customer_key_encryption.key_url == "key-customer"
        assert encrypted.at_rest_encryption.managed_key_encryption is None
        assert plain.at_rest_encryption.managed_key_encryption.enabled is False

    def test_aws_managed_key(self, discoverer, clients):
        clients["kms"].describe_key.return_value = {"KeyMetadata": {"KeyManager": "AWS"}}

        volume = discoverer.handle_volume({"VolumeId": "vol-3", "Encrypted": True, "KmsKeyId": "key-aws"})

        assert volume.at_rest_encryption.managed_key_encryption.enabled is True
        assert volume.at_rest_encryption.managed_key_encryption.algorithm == "AES256"

    def test_network_interface(self, discoverer):
        interface = discoverer.list_resources()[3]

        assert interface.private_ips == ["10.0.0.5"]
        assert interface.public_ip == "52.1.2.3"
        assert interface.parent_id == ec2_arn("vpc/vpc-1")

    def test_vpc(self, discoverer):
        vpc = discoverer.list_resources()[4]

        assert vpc.id == ec2_arn("vpc/vpc-1")
        assert vpc.address_prefixes == ["10.0.0.0/16"]
        assert vpc.parent_id == ACCOUNT_ID

    def test_broken_item_is_skipped(self, discoverer, clients):
        clients["ec2"].get_paginator.side_effect = paginated({
            "describe_instances": [{"Reservations": [{"Instances": [{"LaunchTime": LAUNCH_TIME}, INSTANCE]}]}],
        })

        resources = discoverer.list_resources()

        assert [r.id for r in resources] == [ec2_arn("instance/i-0abc")]
        assert discoverer.stats["resources_with_errors"] == 1

    def test_unexpected_item_error_is_skipped(self, discoverer, clients):
        malformed = dict(INSTANCE, InstanceId="i-bad", Monitoring="enabled")
        clients["ec2"].get_paginator.side_effect = paginated({
            "describe_instances": [{"Reservations": [{"Instances": [malformed, INSTANCE]}]}],
        })

        resources = discoverer.list_resources()

        assert [r.id for r in resources] == [ec2_arn("instance/i-0abc")]
        assert discoverer.stats["resources_with_errors"] == 1

    def test_monitoring_missing(self, discoverer, clients):
        clients["ec2"].get_paginator.side_effect = paginated({
            "describe_instances": [{"Reservations": [{"Instances": [
                {"InstanceId": "i-1", "Monitoring": None}, {"InstanceId": "i-2"}
            ]}]}],
        })

        resources = discoverer.list_resources()

        assert [r.name for r in resources] == ["i-1", "i-2"]
        assert not resources[0].resource_logging.monitoring_log_data_enabled

    def test_api_failure_raises(self, discoverer, clients):
        clients["ec2"].get_paginator.side_effect = paginated({
            "describe_instances": client_error("UnauthorizedOperation", "DescribeInstances"),
        })

        with pytest.raises(DiscoveryError) as excinfo:
            discoverer.list_resources()

        assert excinfo.value.service == "ec2"
        assert "UnauthorizedOperation" in str(excinfo.value)


class TestS3Discoverer:

    ENDPOINT = f"https://logs.s3.{REGION}.amazonaws.com"

    @pytest.fixture
    def discoverer(self, config, session, clients):
        s3 = clients["s3"]
        s3.list_buckets.return_value = {"Buckets": [{"Name": "logs", "CreationDate": LAUNCH_TIME}]}
        s3.get_bucket_location.return_value = {"LocationConstraint": REGION}
        s3.get_bucket_tagging.return_value = {"TagSet": [{"Key": "team", "Value": "sec"}]}
        s3.get_bucket_encryption.return_value = {"ServerSideEncryptionConfiguration": {"Rules": [
            {"ApplyServerSideEncryptionByDefault": {"SSEAlgorithm": "AES256"}}
        ]}}
        s3.get_public_access_block.return_value = {"PublicAccessBlockConfiguration": {
            "BlockPublicAcls": True, "IgnorePublicAcls": True, "BlockPublicPolicy": True, "RestrictPublicBuckets": True
        }}
        s3.get_bucket_policy.return_value = {"Policy": json.dumps({"Statement": [{
            "Effect": "Deny",
            "Principal": "*",
            "Action": "s3:*",
            "Condition": {"Bool": {"aws:SecureTransport": "false"}},
        }]})}
        return S3Discoverer(config, session)

    def test_bucket_and_service(self, discoverer):
        storage, service = discoverer.list_resources()

        assert isinstance(storage, ObjectStorage)
        assert isinstance(service, ObjectStorageService)
        assert storage.id == "arn:aws:s3:::logs"
        assert service.id == self.ENDPOINT
        assert storage.parent_id == service.id
        assert service.parent_id == ACCOUNT_ID

    def test_translation_logged_per_bucket(self, discoverer):
        discoverer.logger = MagicMock()

        discoverer.list_resources()

        discoverer.logger.info.assert_any_call("✓ Bucket: Found 2 resources")

    def test_storage_properties(self, discoverer):
        storage, _ = discoverer.list_resources()

        assert storage.labels == {"team": "sec"}
        assert storage.public_access is False
        assert storage.at_rest_encryption.managed_key_encryption.algorithm == "AES256"
        assert storage.geo_location.region == REGION

    def test_service_relationships(self, discoverer):
        _, service = discoverer.list_resources()

        assert related(service) == [
            Relationship("parent", ACCOUNT_ID),
            Relationship("storage", "arn:aws:s3:::logs"),
        ]

    def test_transport_encryption(self, discoverer):
        _, service = discoverer.list_resources()
        props = resource_map(service)

        assert props["ports"] == [443]
        assert props["httpEndpoint"]["url"] == self.ENDPOINT
        assert props["httpEndpoint"]["transportEncryption"]["enforced"] is True

    def test_missing_policy_is_not_enforced(self, discoverer, clients):
        clients["s3"].get_bucket_policy.side_effect = client_error("NoSuchBucketPolicy")

        _, service = discoverer.list_resources()

        assert service.http_endpoint.transport_encryption.enforced is False

    def test_missing_public_access_block_is_public(self, discoverer, clients):
        clients["s3"].get_public_access_block.side_effect = client_error("NoSuchPublicAccessBlockConfiguration")

        storage, _ = discoverer.list_resources()

        assert storage.public_access is True

    def test_kms_encryption(self, discoverer, clients):
        clients["s3"].get_bucket_encryption.return_value = {"ServerSideEncryptionConfiguration": {"Rules": [
            {"ApplyServerSideEncryptionByDefault": {"SSEAlgorithm": "aws:kms", "KMSMasterKeyID": "key-1"}}
        ]}}

        storage, _ = discoverer.list_resources()

        assert storage.at_rest_encryption.customer_key_encryption.key_url == "key-1"

    def test_default_region(self, discoverer, clients):
        clients["s3"].get_bucket_location.return_value = {"LocationConstraint": None}

        _, service = discoverer.list_resources()

        assert service.id == "https://logs.s3.us-east-1.amazonaws.com"

    def test_list_failure_raises(self, discoverer, clients):
        clients["s3"].list_buckets.side_effect = client_error("AccessDenied", "ListBuckets")

        with pytest.raises(DiscoveryError):
            discoverer.list_resources()


class TestIAMDiscoverer:

    def test_account_with_alias(self, config, session, clients):
        clients["iam"].list_account_aliases.return_value = {"AccountAliases": ["production"]}

        (account,) = IAMDiscoverer(config, session).list_resources()

        assert isinstance(account, Account)
        assert account.id == ACCOUNT_ID
        assert account.name == "production"
        assert account.geo_location.region == "global"
        assert "ResponseMetadata" not in json.loads(account.raw)["sts.CallerIdentity"][0]

    def test_account_without_alias(self, config, session, clients):
        clients["iam"].list_account_aliases.side_effect = client_error("AccessDenied")

        (account,) = IAMDiscoverer(config, session).list_resources()

        assert account.name == ACCOUNT_ID

    def test_identity_failure_raises(self, config, session, clients):
        clients["sts"].get_caller_identity.side_effect = client_error("ExpiredToken")

        with pytest.raises(DiscoveryError):
            IAMDiscoverer(config, session).list_resources()


class TestRegistry:

    def test_discoverers_registered(self):
        assert {"ec2", "s3", "iam"} <= set(get_registry().list_registered_services())

    def test_resource_type_mapping(self):
        mapping = get_registry().get_resource_type_mapping()

        assert mapping["VirtualMachine"] == "ec2"
        assert mapping["ObjectStorageService"] == "s3"
        assert mapping["Account"] == "iam"
