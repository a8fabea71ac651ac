"""bufconfig: Policy (`buf.policy.yaml`)."""

from .buf_policy_yaml import (  # noqa: F401
    BufPolicyYAMLFile,
    new_buf_policy_yaml_file,
    read_buf_policy_yaml_file,
    write_buf_policy_yaml_file,
    get_buf_policy_yaml_file_for_prefix,
    put_buf_policy_yaml_file_for_prefix,
)
