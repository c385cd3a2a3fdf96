# users/views.py

from django.contrib.auth import login, logout
from django.contrib.auth.decorators import login_required
from django.contrib.auth.forms import AuthenticationForm
from django.http import JsonResponse
from django.views.decorators.http import require_http_methods, require_POST

from market.models import Profile
from market.utils import error_response, form_error_message, get_profile
from .forms import UserRegisterForm, ProfileUpdateForm, UserUpdateForm


def me_to_dict(user):
    profile = get_profile(user)
    return {
        'id': user.id,
        'username': user.username,
        'firstName': user.first_name,
        'lastName': user.last_name,
        'email': user.email,
        'role': 'ADMIN' if user.is_staff else 'STUDENT',
        'phone': profile.phone,
        'promptpayId': profile.promptpay_id,
        'lineLinked': bool(profile.line_id),
    }


@require_POST
def register(request):
    form = UserRegisterForm(request.POST)
    if not form.is_valid():
        return error_response(form_error_message(form))

    user = form.save() # บันทึก User ก่อน
    # สร้าง Profile ที่ผูกกับ user
    Profile.objects.create(
        user=user,
        phone=form.cleaned_data.get('phone', ''),
        promptpay_id=form.cleaned_data.get('promptpay_id', ''),
    )
    return JsonResponse(me_to_dict(user), status=201)


@require_POST
def login_view(request):
    form = AuthenticationForm(request, data=request.POST)
    if not form.is_valid():
        return error_response("ชื่อผู้ใช้หรือรหัสผ่านไม่ถูกต้อง", status=401)
    login(request, form.get_user())
    return JsonResponse(me_to_dict(form.get_user()))


@require_POST
def logout_view(request):
    logout(request)
    return JsonResponse({'message': 'ออกจากระบบแล้ว'})


@login_required
@require_http_methods(['GET', 'POST'])
def me(request):
    if request.method == 'POST':
        # ส่งมาเฉพาะช่องที่แก้ ช่องอื่นใช้ค่าเดิม
        profile = get_profile(request.user)
        user_data = {
            'first_name': request.POST.get('first_name', request.user.first_name),
            'last_name': request.POST.get('last_name', request.user.last_name),
            'email': request.POST.get('email', request.user.email),
        }
        profile_data = {
            'phone': request.POST.get('phone', profile.phone),
            'promptpay_id': request.POST.get('promptpay_id', profile.promptpay_id),
        }
        u_form = UserUpdateForm(user_data, instance=request.user)
        p_form = ProfileUpdateForm(profile_data, instance=profile)

        if not u_form.is_valid():
            return error_response(form_error_message(u_form))
        if not p_form.is_valid():
            return error_response(form_error_message(p_form))
        u_form.save()
        p_form.save()

    return JsonResponse(me_to_dict(request.user))
