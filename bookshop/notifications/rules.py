from bookshop.notifications.events import OrderEvent
from bookshop.notifications.channels import Channel


NOTIFICATION_RULES = {

    OrderEvent.ORDER_PLACED: {
        Channel.EMAIL_USER: True,
        Channel.INAPP_ADMIN: True,
        Channel.EMAIL_ADMIN: True,
    },

    OrderEvent.ORDER_CONFIRMED: {
        Channel.EMAIL_USER: True,
        Channel.INAPP_ADMIN: True,
    },

    OrderEvent.ORDER_CANCELLED: {
        Channel.EMAIL_USER: True,
        Channel.INAPP_ADMIN: True,
        Channel.EMAIL_ADMIN: True,
    },

    OrderEvent.ORDER_COMPLETED: {
        Channel.EMAIL_USER: True,
        Channel.INAPP_ADMIN: True,
    },

}

# subject line / in-app title per event
EVENT_TITLES = {
    OrderEvent.ORDER_PLACED: "Order placed",
    OrderEvent.ORDER_CONFIRMED: "Order confirmed",
    OrderEvent.ORDER_CANCELLED: "Order cancelled",
    OrderEvent.ORDER_COMPLETED: "Order picked up",
}
