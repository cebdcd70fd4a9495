"""
Places Forms
"""

from django import forms
from django.utils.translation import gettext_lazy as _

from core.geocoding import PlaceAutocomplete
from places.models import Amenity


class VenueSubmissionForm(forms.Form):
    """
    Venue details for a submission.

    ``lat``/``lng`` come from the address autocomplete on the page; when the
    browser did not provide them the address is geocoded here.
    """

    name = forms.CharField(
        label=_('Location name'),
        min_length=2,
        max_length=200,
        error_messages={'min_length': _('Location name must be at least 2 characters.')},
        widget=forms.TextInput(attrs={'class': 'form-control', 'placeholder': _('e.g. Blue Bottle Coffee')}),
    )
    address = forms.CharField(
        label=_('Location'),
        min_length=2,
        max_length=500,
        error_messages={'min_length': _('Location must be at least 2 characters.')},
        widget=forms.TextInput(attrs={'class': 'form-control', 'autocomplete': 'off'}),
    )
    lat = forms.FloatField(required=False, min_value=-90, max_value=90, widget=forms.HiddenInput)
    lng = forms.FloatField(required=False, min_value=-180, max_value=180, widget=forms.HiddenInput)
    amenities = forms.MultipleChoiceField(
        label=_('Amenities'),
        choices=Amenity.choices,
        required=False,
        widget=forms.CheckboxSelectMultiple,
    )

    def clean(self):
        cleaned = super().clean()
        address = cleaned.get('address')
        if not address or self.errors:
            return cleaned

        if cleaned.get('lat') is None or cleaned.get('lng') is None:
            place = PlaceAutocomplete.lookup(address)
            if place is None:
                raise forms.ValidationError(_('Please select a location from the suggestions.'))
            cleaned['address'] = place.formatted_address
            cleaned['lat'] = place.lat
            cleaned['lng'] = place.lng
        return cleaned


class VenueEditForm(forms.Form):
    """Inline edit of a venue; amenities are comma-separated text."""

    name = forms.CharField(max_length=200)
    address = forms.CharField(max_length=500)
    amenities = forms.CharField(required=False, help_text=_('Comma separated, e.g. wifi, toilets'))
