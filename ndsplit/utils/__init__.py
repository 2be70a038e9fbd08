# ndsplit/utils/__init__.py
# logging, config and ndjson helpers; import submodules directly
