from django.core.management.base import BaseCommand
from django.utils import timezone
from auctions.services import activate_due_auctions, close_due_auctions


class Command(BaseCommand):
    help = 'Starts auctions whose start time has come and closes the ones that ran out'

    def handle(self, *args, **options):
        now = timezone.now()

        activated = activate_due_auctions(now=now)
        closed = close_due_auctions(now=now)

        if activated or closed:
            self.stdout.write(
                self.style.SUCCESS(
                    f'Activated {activated} auctions and closed {closed} auctions'
                )
            )
        else:
            self.stdout.write("No auctions due")
