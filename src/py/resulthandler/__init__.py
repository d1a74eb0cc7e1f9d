from .http.model import HTTPRequest, HTTPResponseWriter, HTTPWriteError  # NOQA: F401
from .http.api import WebContext, Context  # NOQA: F401
from .template import Template, HTMPLTemplate, TemplateError, TemplateNotFound  # NOQA: F401
from .result import (  # NOQA: F401
	Result,
	ResultHead,
	ResultText,
	ResultHTML,
	ResultJSON,
	ResultCSV,
	ResultFile,
	ResultData,
	ResultRedirect,
	render,
)
from .bridge.asgi import asgi  # NOQA: F401

# EOF
