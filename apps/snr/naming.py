from config import SNR_DESTINATION_SUFFIX, SNR_PROFILE_PREFIX


def profile_name_for(user_id: str) -> str:
    """Remote destination profile name used when provisioning user_id"""
    return f"{SNR_PROFILE_PREFIX}{user_id}"


def destination_name_for(user_id: str) -> str:
    return f"RD_{user_id}_{SNR_DESTINATION_SUFFIX}"
