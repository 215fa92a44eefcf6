"""ci_tools

CI runtime glue: subprocess execution, git queries, environment access and
ref resolution. Nothing here knows about SARIF or the upload API.
"""
