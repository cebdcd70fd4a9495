"""
Places Frontend Views - Map, submission form and admin dashboard.

- discovery_view: the public map with amenity filters and marker overlay
- add_place_view: venue submission (signed-in identities only)
- admin_dashboard_view: places table and users section for admins
- venue_action_view / user_action_view: POST targets of the dashboard rows
"""

import logging
from urllib.parse import urlencode

from django.contrib import messages
from django.shortcuts import redirect, render
from django.urls import reverse
from django.views.decorators.http import require_POST

from accounts.decorators import admin_required, identity_required
from accounts.moderation import UsersSection
from core.exceptions import (
    AuthorizationError,
    BackendOperationError,
    RecordNotFound,
    SubmissionValidationError,
)
from core.notices import Notice, flash

from places.discovery import (
    AmenityFilters,
    build_geojson,
    filter_controls,
    filter_venues,
    load_working_set,
    venue_card,
    viewport_for,
)
from places.forms import VenueEditForm, VenueSubmissionForm
from places.moderation import PlacesTable
from places.submission import SUBMITTED_MESSAGE, UNAUTHORIZED_SUBMISSION_MESSAGE, ImageSelection, submit_venue

logger = logging.getLogger(__name__)

# Query parameters the dashboard keeps across row actions
DASHBOARD_STATE_PARAMS = ('places_q', 'places_page', 'users_q', 'users_page')


# ==================== DISCOVERY ====================

def discovery_view(request):
    """
    Public map.

    ``?<tag>=1`` enables an amenity filter; ``?venue=<id>&photo=<n>`` opens
    the overlay of a marker.
    """
    filters = AmenityFilters.from_query(request.GET)
    try:
        working_set = load_working_set()
    except BackendOperationError as e:
        logger.error(f"Loading venues for the map failed: {e}")
        messages.error(request, 'Could not load places. Please try again.')
        working_set = []
    venues = filter_venues(working_set, filters)

    selected = None
    venue_id = request.GET.get('venue')
    if venue_id:
        venue = next((v for v in venues if v.id == venue_id), None)
        if venue is not None:
            try:
                photo = int(request.GET.get('photo', 0))
            except ValueError:
                photo = 0
            selected = venue_card(venue, photo)

    viewport = viewport_for(request)
    viewport.save(request.session)

    context = {
        'venues': venues,
        'geojson': build_geojson(venues),
        'filters': filters,
        'filter_controls': filter_controls(filters, request.GET.get('width')),
        'selected': selected,
        'viewport': viewport.as_dict(),
    }
    return render(request, 'places/map.html', context)


# ==================== SUBMISSION ====================

@identity_required(message=UNAUTHORIZED_SUBMISSION_MESSAGE)
def add_place_view(request):
    if request.method != 'POST':
        return render(request, 'places/add_place.html', {'form': VenueSubmissionForm()})

    form = VenueSubmissionForm(request.POST)
    selection = ImageSelection()
    flash(request, selection.add_many(request.FILES.getlist('images')))

    if not form.is_valid():
        return render(request, 'places/add_place.html', {'form': form})

    try:
        submit_venue(request.user, form.cleaned_data, selection)
    except (SubmissionValidationError, BackendOperationError, AuthorizationError) as e:
        messages.error(request, e.message)
        return render(request, 'places/add_place.html', {'form': form})

    flash(request, Notice.success(SUBMITTED_MESSAGE))
    return redirect('places:discovery')


# ==================== ADMIN DASHBOARD ====================

def _dashboard_redirect(request):
    query = urlencode({
        name: request.POST[name] for name in DASHBOARD_STATE_PARAMS if request.POST.get(name)
    })
    url = reverse('places:admin_dashboard')
    return redirect(f'{url}?{query}' if query else url)


@admin_required
def admin_dashboard_view(request):
    table = PlacesTable()
    section = UsersSection(request.auth_context)
    try:
        table.load()
    except BackendOperationError as e:
        logger.error(f"Loading the places table failed: {e}")
        messages.error(request, 'Could not load places. Please try again.')
    try:
        section.load()
    except BackendOperationError as e:
        logger.error(f"Loading the users section failed: {e}")
        messages.error(request, 'Could not load users. Please try again.')

    table.search(request.GET.get('places_q', ''))
    places_page = table.page_of(request.GET.get('places_page'))
    section.search(request.GET.get('users_q', ''))
    users_page = section.page_of(request.GET.get('users_page'))

    editing = None
    edit_id = request.GET.get('edit')
    if edit_id:
        record = table.rows.get(edit_id)
        if record is not None:
            editing = {
                'record': record,
                'form': VenueEditForm(initial={
                    'name': record.name,
                    'address': record.address,
                    'amenities': ', '.join(record.amenities),
                }),
            }

    context = {
        'places_page': places_page,
        'place_rows': [(record, table.actions_for(record)) for record in places_page.object_list],
        'places_q': table.term,
        'users_page': users_page,
        'user_rows': [(record, section.actions_for(record)) for record in users_page.object_list],
        'users_q': section.term,
        'editing': editing,
    }
    return render(request, 'places/admin_dashboard.html', context)


@require_POST
@admin_required
def venue_action_view(request, venue_id):
    table = PlacesTable()
    action = request.POST.get('action')
    try:
        table.load()
        if action == 'approve':
            notice = table.approve(venue_id)
        elif action == 'reject':
            notice = table.reject(venue_id)
        elif action == 'edit':
            form = VenueEditForm(request.POST)
            if not form.is_valid():
                raise SubmissionValidationError('Name and address are required.')
            notice = table.edit(
                venue_id,
                form.cleaned_data['name'],
                form.cleaned_data['address'],
                form.cleaned_data.get('amenities', ''),
            )
        elif action == 'delete':
            notice = table.delete(venue_id)
        else:
            notice = Notice.error('Unknown action.')
    except (RecordNotFound, SubmissionValidationError, BackendOperationError) as e:
        notice = Notice.error(e.message)
    flash(request, notice)
    return _dashboard_redirect(request)


@require_POST
@admin_required
def user_action_view(request, user_id):
    section = UsersSection(request.auth_context)
    action = request.POST.get('action')
    try:
        section.load()
        if action == 'toggle_admin':
            notice = section.toggle_admin(user_id)
        elif action == 'toggle_ban':
            notice = section.toggle_ban(user_id)
        elif action == 'delete':
            notice = section.delete(user_id)
        else:
            notice = Notice.error('Unknown action.')
    except (AuthorizationError, RecordNotFound, BackendOperationError) as e:
        notice = Notice.error(e.message)
    flash(request, notice)
    return _dashboard_redirect(request)
