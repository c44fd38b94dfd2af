"""Interface adapters: Transports, archive unpacking and install-layout probing."""

from xspect_prebuilt.adapters.ports import (
    ArchiveMaterializerPort,
    ArchiveTransportPort,
    BinaryLocatorPort,
    CommandRunnerPort,
    EnvironmentTokenResolver,
    PlatformDetectorPort,
    SubprocessCommandRunner,
    TokenResolverPort,
)
