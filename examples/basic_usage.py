"""Basic usage examples for aws-mfa-secure."""

from aws_mfa_secure import MfaSessionManager, load_settings


def main():
    """Show the session state of the current profile and use it with boto3."""
    manager = MfaSessionManager(load_settings())

    print("aws-mfa-secure Examples")
    print("=" * 50)

    # Example 1: Does this profile need MFA?
    print(f"\n1. Profile '{manager.profile}' needs MFA: {manager.is_mfa_required()}")

    # Example 2: Is the cached session still good?
    if manager.is_mfa_required():
        print(f"\n2. Cached session valid: {manager.has_valid_cache()}")

    # Example 3: boto3 session that prompts for MFA only when the cache expired
    print("\n3. Caller identity:")
    session = manager.create_boto3_session()
    identity = session.client("sts").get_caller_identity()
    print(f"   Account: {identity['Account']}")
    print(f"   ARN: {identity['Arn']}")


if __name__ == "__main__":
    main()
