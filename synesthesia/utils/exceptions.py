"""Custom exceptions for the stem separation pipeline"""


class StemSeparationError(Exception):
    """Base exception for stem separation errors"""

    reason = "unexpected failure"


class MissingCredentialsError(StemSeparationError):
    """API key or workflow id is absent or malformed"""

    reason = "missing/invalid credentials"


class AuthOrConnectionError(StemSeparationError):
    """Upload slot could not be acquired"""

    reason = "auth or connection failure"


class UploadError(StemSeparationError):
    """File bytes could not be pushed to the upload slot"""

    reason = "upload failure"


class JobCreationError(StemSeparationError):
    """Provider rejected the job creation request"""

    reason = "job creation failure"


class JobProcessingError(StemSeparationError):
    """Provider reported the job as failed"""

    reason = "job processing failure"


class PollingTimeoutError(StemSeparationError):
    """Job did not reach a terminal status within the polling budget"""

    reason = "polling timeout"


class JobStatusError(StemSeparationError):
    """Job status could not be read while polling"""


class ExtractionError(StemSeparationError):
    """Provider result holds no recognizable stem"""

    reason = "no recognizable output"


class UnexpectedFailureError(StemSeparationError):
    """Anything not covered by the classified failures"""


class DownloadFailedError(StemSeparationError):
    """Remote media could not be turned into a local audio file"""

    reason = "download failed"


class ValidationError(Exception):
    """Exception for input validation errors"""


class PayloadTooLargeError(ValidationError):
    """Exception for uploads over the configured size limit"""


class ServiceUnavailableError(Exception):
    """Exception for services that were not initialized"""
