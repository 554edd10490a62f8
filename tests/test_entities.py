from whereabouts.entities import (
    NETWORK_ATTACHMENT_ANNOTATION,
    TEST_IMAGE,
    pod_network_selection_elements,
    pod_object,
    replica_set_object,
    replica_set_query,
    stateful_set_spec,
)


def test_pod_object_metadata_and_container():
    pod = pod_object("whereabouts-basic-test", "default", {"tier": "x"}, {"a": "b"})
    assert pod["metadata"] == {
        "name": "whereabouts-basic-test",
        "namespace": "default",
        "labels": {"tier": "x"},
        "annotations": {"a": "b"},
    }
    (container,) = pod["spec"]["containers"]
    assert container["name"] == "samplepod"
    assert container["image"] == TEST_IMAGE
    assert container["command"][0] == "/bin/ash"


def test_pod_object_omits_missing_maps():
    pod = pod_object("p", "default", None, None)
    assert "labels" not in pod["metadata"]
    assert "annotations" not in pod["metadata"]


def test_pod_object_uses_alpine_image():
    pod = pod_object("p", "default", None, None)
    assert pod["spec"]["containers"][0]["image"] == "quay.io/dougbtv/alpine:latest"


def test_stateful_set_spec():
    annotations = pod_network_selection_elements("wa-nad")
    sts = stateful_set_spec("statefulthingy", "default", "web", 20, annotations)
    assert sts["metadata"] == {"name": "web"}
    spec = sts["spec"]
    assert spec["replicas"] == 20
    assert spec["selector"]["matchLabels"] == {"app": "web"}
    assert spec["serviceName"] == "web"
    assert spec["podManagementPolicy"] == "Parallel"
    template = spec["template"]
    assert template["metadata"]["labels"] == spec["selector"]["matchLabels"]
    assert template["metadata"]["annotations"] == annotations
    assert template["spec"]["containers"][0]["name"] == "statefulthingy"


def test_replica_set_object():
    labels = {"tier": "whereabouts-scale-test"}
    annotations = pod_network_selection_elements("wa-nad")
    rs = replica_set_object(3, "whereabouts-scale-test", "default", labels, annotations)
    assert rs["kind"] == "ReplicaSet"
    assert rs["apiVersion"] == "v1"
    assert rs["metadata"]["labels"] == labels
    assert rs["spec"]["replicas"] == 3
    assert rs["spec"]["selector"]["matchLabels"] == labels
    assert rs["spec"]["template"]["metadata"] == {
        "labels": labels,
        "annotations": annotations,
        "namespace": "default",
    }
    assert rs["spec"]["template"]["spec"]["containers"][0]["name"] == "samplepod"


def test_replica_set_query_matches_tier_label():
    assert replica_set_query("whereabouts-scale-test") == "tier=whereabouts-scale-test"


def test_pod_network_selection_elements_joins_names():
    result = pod_network_selection_elements("net-a", "net-b")
    assert result == {NETWORK_ATTACHMENT_ANNOTATION: "net-a,net-b"}


def test_pod_network_selection_elements_empty():
    assert pod_network_selection_elements() == {NETWORK_ATTACHMENT_ANNOTATION: ""}


def test_pod_network_selection_uses_networks_annotation_key():
    assert pod_network_selection_elements("wa-nad") == {"k8s.v1.cni.cncf.io/networks": "wa-nad"}