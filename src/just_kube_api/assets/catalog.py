"""Release locations of the control plane binaries."""

from just_kube_api.types import AssetDescriptor, AssetKind

KUBE_APISERVER = "kube-apiserver"
ETCD = "etcd"

KUBE_APISERVER_URL = "https://dl.k8s.io/{version}/bin/{os}/{arch}/kube-apiserver"
KUBE_APISERVER_DIGEST_URL = "{url}.sha256"

ETCD_RELEASES_URL = "https://github.com/etcd-io/etcd/releases/download/{version}"
ETCD_URL = ETCD_RELEASES_URL + "/{name}-{version}-{os}-{arch}.tar.gz"
ETCD_DIGEST_URL = ETCD_RELEASES_URL + "/SHA256SUMS"
ETCD_MEMBER = "{name}-{version}-{os}-{arch}/etcd"


def kube_apiserver(version: str, os: str, arch: str) -> AssetDescriptor:
    return AssetDescriptor(
        name=KUBE_APISERVER,
        version=version,
        os=os,
        arch=arch,
        source_url_template=KUBE_APISERVER_URL,
        manifest_url_template=KUBE_APISERVER_DIGEST_URL,
        kind=AssetKind.RAW_BINARY,
    )


def etcd(version: str, os: str, arch: str) -> AssetDescriptor:
    return AssetDescriptor(
        name=ETCD,
        version=version,
        os=os,
        arch=arch,
        source_url_template=ETCD_URL,
        manifest_url_template=ETCD_DIGEST_URL,
        kind=AssetKind.TAR_GZ_ARCHIVE,
        member_template=ETCD_MEMBER,
    )
