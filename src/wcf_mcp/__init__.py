"""Client and MCP server for a WeChatFerry-style messaging automation service."""

from .client import CmdClient
from .download import AttachmentDownload, DownloadState

__version__ = "0.1.0"
