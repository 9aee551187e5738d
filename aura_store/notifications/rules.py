from aura_store.notifications.events import OrderEvent
from aura_store.notifications.channels import Channel


NOTIFICATION_RULES = {

    OrderEvent.ORDER_PLACED: {
        Channel.POPUP_USER: True,
        Channel.EMAIL_USER: True,
        Channel.INAPP_ADMIN: True,
        Channel.EMAIL_ADMIN: True,
    },

    OrderEvent.PAYMENT_SUCCESS: {
        Channel.POPUP_USER: True,
        Channel.EMAIL_USER: True,
        Channel.INAPP_ADMIN: True,
        Channel.EMAIL_ADMIN: True,
    },

    OrderEvent.STATUS_CHANGED: {
        Channel.EMAIL_USER: True,
        Channel.INAPP_USER: True,
    },

    OrderEvent.ORDER_CANCELLED: {
        Channel.POPUP_USER: True,
        Channel.EMAIL_USER: True,
        Channel.INAPP_USER: True,
        Channel.INAPP_ADMIN: True,
        Channel.EMAIL_ADMIN: True,
    },

    OrderEvent.REFUND_PROCESSED: {
        Channel.EMAIL_USER: True,
        Channel.INAPP_USER: True,
        Channel.INAPP_ADMIN: True,
    },

}
