from django.contrib import admin

from ticketing.models import Buyer, Event, Ticket, TicketType


class TicketTypeInline(admin.TabularInline):
    model = TicketType
    extra = 1


@admin.register(Event)
class EventAdmin(admin.ModelAdmin):
    list_display = ["title", "venue", "starts_at", "organizer"]
    search_fields = ["title", "venue"]
    list_filter = ["organizer"]
    inlines = [TicketTypeInline]


@admin.register(TicketType)
class TicketTypeAdmin(admin.ModelAdmin):
    list_display = ["name", "event", "price", "stock"]
    list_filter = ["event"]


@admin.register(Buyer)
class BuyerAdmin(admin.ModelAdmin):
    list_display = ["name", "email", "created_at"]
    search_fields = ["name", "email"]


@admin.register(Ticket)
class TicketAdmin(admin.ModelAdmin):
    list_display = ["code", "ticket_type", "buyer", "used", "redeemed_at"]
    list_filter = ["used", "ticket_type__event"]
    search_fields = ["code", "buyer__email"]
    readonly_fields = ["code", "used", "redeemed_at", "buyer", "ticket_type"]
