import copy

import pytest

from rolling_deployer.types import (
    Container,
    HostConfig,
    Image,
    Mount,
    Network,
    NetworkSettings,
    Port,
)

NETWORK = {
    "IPAMConfig": None,
    "Links": None,
    "Aliases": ["web"],
    "NetworkID": "net123",
    "EndpointID": "ep456",
    "Gateway": "172.17.0.1",
    "IPAddress": "172.17.0.2",
    "IPPrefixLen": 16,
    "IPv6Gateway": "",
    "GlobalIPv6Address": "",
    "GlobalIPv6PrefixLen": 0,
    "MacAddress": "02:00:00:00:00:01",
    "DriverOpts": None,
}

MOUNT = {
    "Destination": "/etc/traefik/dynamic",
    "Source": "/opt/dev/current",
    "Type": "bind",
    "Mode": "rw",
    "RW": True,
    "Propagation": "rprivate",
}

CONTAINER = {
    "Id": "abc123",
    "Names": ["/proj_traefik_1"],
    "Image": "traefik:v3",
    "ImageID": "sha256:deadbeef",
    "Command": "/entrypoint.sh traefik",
    "Created": 1700000000,
    "Ports": [{"IP": "0.0.0.0", "PrivatePort": 80, "PublicPort": 8080, "Type": "tcp"}],
    "Labels": {"com.docker.compose.service": "traefik"},
    "State": "running",
    "Status": "Up 2 hours",
    "HostConfig": {"NetworkMode": "bridge"},
    "NetworkSettings": {"Networks": {"bridge": NETWORK}},
    "Mounts": [MOUNT],
}


def test_container_parses_nested_structures():
    container = Container.from_dict(CONTAINER)
    assert container.id == "abc123"
    assert container.names == ["/proj_traefik_1"]
    assert container.ports[0].public_port == 8080
    assert container.host_config.network_mode == "bridge"
    assert container.network_settings.networks["bridge"].ip_address == "172.17.0.2"
    assert container.mounts[0].target == "/etc/traefik/dynamic"
    assert container.labels == {"com.docker.compose.service": "traefik"}


def test_container_labels_optional():
    data = copy.deepcopy(CONTAINER)
    del data["Labels"]
    assert Container.from_dict(data).labels is None


def test_container_missing_required_field():
    data = copy.deepcopy(CONTAINER)
    del data["State"]
    with pytest.raises(ValueError, match="State"):
        Container.from_dict(data)


def test_container_null_required_field():
    data = copy.deepcopy(CONTAINER)
    data["Image"] = None
    with pytest.raises(ValueError, match="Image"):
        Container.from_dict(data)


def test_mount_aliases_match_canonical_names():
    lower = {
        "target": MOUNT["Destination"],
        "source": MOUNT["Source"],
        "type": MOUNT["Type"],
        "mode": MOUNT["Mode"],
        "rw": MOUNT["RW"],
        "propagation": MOUNT["Propagation"],
    }
    assert Mount.from_dict(lower) == Mount.from_dict(MOUNT)


def test_mount_target_alias():
    data = dict(MOUNT)
    data["Target"] = data.pop("Destination")
    assert Mount.from_dict(data).target == MOUNT["Destination"]


def test_port_optional_fields():
    port = Port.from_dict({"PrivatePort": 443, "Type": "tcp"})
    assert port.ip is None
    assert port.public_port is None
    assert port.private_port == 443


def test_port_out_of_range():
    with pytest.raises(ValueError):
        Port.from_dict({"PrivatePort": 70000, "Type": "tcp"})


def test_network_prefix_len_must_fit_byte():
    data = dict(NETWORK)
    data["IPPrefixLen"] = 300
    with pytest.raises(ValueError):
        Network.from_dict(data)


def test_network_settings_maps_names():
    settings = NetworkSettings.from_dict({"Networks": {"a": NETWORK, "b": NETWORK}})
    assert sorted(settings.networks) == ["a", "b"]
    assert settings.networks["a"].aliases == ["web"]


def test_host_config_type_checked():
    with pytest.raises(ValueError):
        HostConfig.from_dict({"NetworkMode": 5})


def test_image_from_dict():
    image = Image.from_dict(
        {
            "Containers": 2,
            "Created": 1700000000,
            "Id": "sha256:feed",
            "Labels": None,
            "ParentId": "",
            "RepoDigests": [],
            "RepoTags": ["traefik:v3"],
            "SharedSize": -1,
            "Size": 1024,
        }
    )
    assert image.repo_tags == ["traefik:v3"]
    assert image.labels is None
    assert image.shared_size == -1


def test_from_dict_rejects_non_mapping():
    with pytest.raises(ValueError):
        Container.from_dict(["not", "a", "dict"])