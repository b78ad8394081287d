from bridge.adapters.filedrop.oif_sink import FileDropSink, default_incoming_dir

__all__ = [
    "FileDropSink",
    "default_incoming_dir",
]
