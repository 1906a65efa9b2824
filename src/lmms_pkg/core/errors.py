# src/lmms_pkg/core/errors.py


class LmmsPkgError(Exception):
    """Base application error for lmms-pkg.

    Every failure the CLI knows how to report derives from this class. The
    message is shown to the user as-is, so keep it readable.
    """

    pass


class NonExistingFileError(LmmsPkgError):
    """A required input file or directory is absent at the point of use."""


class AlreadyExistingFileError(LmmsPkgError):
    """An operation would overwrite an artifact left by a previous run."""


class DirectoryCreationError(LmmsPkgError):
    """A directory the pipeline needs could not be created."""


class InvalidXmlFileError(LmmsPkgError):
    """Content is not well-formed XML or is not a supported LMMS project."""


InvalidDocumentError = InvalidXmlFileError


class PackageImportError(LmmsPkgError):
    pass


class PackageExportError(LmmsPkgError):
    pass


class ArchiveError(LmmsPkgError):
    """The package container cannot be opened, read or written."""
