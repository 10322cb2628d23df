from beyond_mask.models.conversation import Conversation, Message, Role

__all__ = ["Conversation", "Message", "Role"]
